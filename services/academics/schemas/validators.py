# services/academics/schemas/validators.py


def not_blank(value: str, label: str) -> str:
    if value is None or not value.strip():
        raise ValueError(f"{label} cannot be blank")
    return value.strip()
