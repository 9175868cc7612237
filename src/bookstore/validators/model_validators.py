from sqlalchemy import inspect as sa_inspect


def find_unknown_model_kwargs(model, kwargs: dict) -> list[str]:
    """
    Return the sorted kwarg keys that are not mapped attributes of `model`.
    - model: the SQLAlchemy model class (not instance)
    - kwargs: dict of incoming kwargs to validate
    """
    mapper = sa_inspect(model)
    allowed = {attr.key for attr in mapper.attrs}
    return sorted(k for k in kwargs if k not in allowed)


def get_required_columns(model) -> list[str]:
    """
    Columns that are NOT NULL and have no server/default and are not simple auto PKs.
    A natural (non-autoincrement) primary key such as books.isbn is required.
    """
    cols = []
    for col in model.__table__.columns:
        has_default = col.default is not None or col.server_default is not None
        is_auto_pk = col.autoincrement is True and col.primary_key
        if not col.nullable and not has_default and not is_auto_pk:
            cols.append(col.name)
    return cols


def get_primary_key_column(model):
    """
    Return the single primary key column attribute of `model` (e.g. Book.isbn).
    Composite keys are not supported by the keyed repository operations.
    """
    pk = sa_inspect(model).primary_key
    if len(pk) != 1:
        raise TypeError(f"{model.__name__} must have exactly one primary key column")
    return getattr(model, pk[0].key)
