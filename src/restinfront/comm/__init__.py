from .transport import (
    HttpxTransport as HttpxTransport,
    HttpxResponse as HttpxResponse,
    RequestInit as RequestInit,
    Transport as Transport,
    TransportResponse as TransportResponse,
)
from .request import (
    build_request_url as build_request_url,
    build_request_init as build_request_init,
    encode_query_value as encode_query_value,
)
from .fetch import perform_fetch as perform_fetch
