"""Human-readable byte size formatting."""

KB = 1_000
MB = 1_000_000
GB = 1_000_000_000
TB = 1_000_000_000_000


def format_size(num_bytes: int) -> str:
    """Format a byte count using decimal units.

    Bytes, KB and MB are shown without decimals ("847 MB"); GB and TB
    with one decimal place ("12.3 GB").
    """
    if num_bytes < 0:
        raise ValueError(f"size must not be negative: {num_bytes}")
    if num_bytes >= TB:
        return f"{num_bytes / TB:.1f} TB"
    if num_bytes >= GB:
        return f"{num_bytes / GB:.1f} GB"
    if num_bytes >= MB:
        return f"{num_bytes // MB} MB"
    if num_bytes >= KB:
        return f"{num_bytes // KB} KB"
    return f"{num_bytes} B"


def format_size_or_placeholder(size: int | None) -> str:
    """Format a size that may still be unknown; unknown sizes show as "..."."""
    if size is None:
        return "..."
    return format_size(size)