import math


def format_duration(seconds) -> str:
    seconds = float(seconds or 0)
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = round(seconds % 60, 2)
    if hours > 0:
        return f"{hours}h {minutes}m {secs:.2f}s"
    return f"{minutes}m {secs:.2f}s"


def format_number(value) -> float:
    return round(float(value or 0), 2)


def format_file_size(num_bytes) -> str:
    if not num_bytes:
        return '0 Bytes'
    units = ['Bytes', 'KB', 'MB', 'GB']
    i = min(int(math.floor(math.log(num_bytes, 1024))), len(units) - 1)
    value = round(num_bytes / (1024 ** i), 2)
    return f"{value:g} {units[i]}"


def format_csv_number(value) -> str:
    """Render whole numbers without a trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)
