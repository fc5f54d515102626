from __future__ import annotations
from typing import Any, Dict
from procurement.errors import InvalidArgument


def apply_filters(query, specs: Dict[str, Dict[str, Any]], params: Dict[str, Any]):
    """Generic filter builder.

    specs: { param_name: { 'op': callable(query, value)->query, 'coerce': type/func, 'validate': callable(optional) } }

    Empty values are skipped. A failing coerce or validate raises InvalidArgument;
    coerce functions may raise InvalidArgument themselves to carry a precise message.
    """
    for name, meta in specs.items():
        if name not in params or params[name] is None or params[name] == '':
            continue
        val = params[name]
        if 'coerce' in meta:
            try:
                val = meta['coerce'](val)
            except InvalidArgument:
                raise
            except (TypeError, ValueError):
                raise InvalidArgument(f'{name} invalid')
        if 'validate' in meta and not meta['validate'](val):
            raise InvalidArgument(f'{name} invalid')
        query = meta['op'](query, val)
    return query
