# -*- coding: utf-8 -*-


def is_thenable(value):
    """Check if an object can be chained, like a Promise, or is a "result".

    The promise module uses this function to differentiate "chainable" objects
    and direct return values, when using a callback who can returns both.
    It's a structural check: any object exposing a callable `then` attribute
    is adopted, so promises from other libraries are unwrapped too. Classes
    are never thenables: their `then` attribute is an unbound function.

    Returns:
        boolean: True if the value has an attribute 'then' who is callable.
            False if not.
    """
    if isinstance(value, type):
        return False
    return callable(getattr(value, 'then', None))
