from backoffice.shared.utils.datetime import ensure_utc, utc_now
from backoffice.shared.utils.generators import generate_cuid

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
]
