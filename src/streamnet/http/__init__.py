"""HTTP layer: endpoints, JSON codec and the retrying request executor."""

from streamnet.http.codec import decode_body, encode_body
from streamnet.http.endpoint import Endpoint, build_url
from streamnet.http.executor import RequestExecutor

__all__ = ["Endpoint", "RequestExecutor", "build_url", "decode_body", "encode_body"]
