from .pki import KeyPair, generate_key_pair, load_key_pair, load_private_key, load_public_key

__all__ = ["KeyPair", "generate_key_pair", "load_key_pair", "load_private_key", "load_public_key"]
