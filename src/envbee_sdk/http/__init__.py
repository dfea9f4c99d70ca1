"""
Signed HTTP access to the envbee API.

RequestSigner computes the HMAC Authorization header; AuthenticatedHttpClient
issues the request and classifies the response.
"""

from envbee_sdk.http.signer import RequestSigner
from envbee_sdk.http.transport import AuthenticatedHttpClient, build_path

__all__ = [
    "RequestSigner",
    "AuthenticatedHttpClient",
    "build_path",
]
