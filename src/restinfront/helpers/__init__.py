from .helpers import (
    camel_to_snake as camel_to_snake,
    join_paths as join_paths,
    as_callable as as_callable,
    normalize_callable as normalize_callable,
    call_hook as call_hook,
)
from .predicates import (
    is_email as is_email,
    is_url as is_url,
    is_ip as is_ip,
    is_file as is_file,
    sanitize_phone as sanitize_phone,
    parse_datetime as parse_datetime,
    parse_date_only as parse_date_only,
    to_iso_string as to_iso_string,
)
