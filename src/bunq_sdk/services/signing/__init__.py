"""Request signing and response verification."""
from .canonical import request_string, response_string, sign_request, signed_headers, verify_response

__all__ = ["request_string", "response_string", "sign_request", "signed_headers", "verify_response"]
