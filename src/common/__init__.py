from common.ids import generate_id
from common.jsonio import atomic_write_text, read_text

__all__ = ["generate_id", "read_text", "atomic_write_text"]
