from sqlalchemy.orm import class_mapper


def sqlalchemy_to_dict(obj):
    """Convert a SQLAlchemy object to a JSON-safe dictionary for audit rows."""
    if not obj:
        return None
    mapper = class_mapper(obj.__class__)
    result = {}
    for c in mapper.columns:
        value = getattr(obj, c.key)
        # Dates and datetimes as ISO strings
        if hasattr(value, 'isoformat'):
            value = value.isoformat()
        # Decimals (money, weights) as strings so no precision is lost in JSON
        elif hasattr(value, 'normalize') and hasattr(value, 'from_float'):
            value = str(value)
        # Enums by name
        elif hasattr(value, 'name'):
            value = value.name
        result[c.key] = value
    return result

__all__ = ['sqlalchemy_to_dict']
