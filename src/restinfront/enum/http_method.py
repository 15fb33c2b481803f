from enum import StrEnum


# --- Methods issued by the fetch orchestrator ---
class HttpMethod(StrEnum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"

    @property
    def has_body(self) -> bool:
        """Mutating methods carry the serialized entity as body."""
        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)
