from __future__ import annotations
"""Declarative aggregation pipelines over purchase order documents.

A pipeline is a tuple of stage objects. ``run_pipeline`` evaluates it in
order over plain dicts, so the same description runs against fixture data in
tests and against documents loaded by ``services.purchase_store`` (which also
pushes a leading ``Match`` down into SQL).

Example::

    stages = (
        Match(company_id=1),
        Unwind('items'),
        Group('items.category', (('amount', Sum('items.line_total')),), default_key='Unknown'),
        Sort(),
        Limit(5),
    )
    run_pipeline(docs, stages)
    # [{'_id': 'Tools', 'amount': 300.0}, ...]

Group keys land in ``_id`` and every accumulator in its named field.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from .metrics import safe_mean

_MISSING = object()


def get_path(doc: Dict[str, Any], path: str, default: Any = None) -> Any:
    """Resolve a dotted path ('supplier.name') inside nested dicts."""
    cur: Any = doc
    for part in path.split('.'):
        if not isinstance(cur, dict):
            return default
        cur = cur.get(part, _MISSING)
        if cur is _MISSING:
            return default
    return cur


def _set_path(doc: Dict[str, Any], path: str, value: Any) -> Dict[str, Any]:
    head, _, rest = path.partition('.')
    out = dict(doc)
    if rest:
        out[head] = _set_path(doc.get(head) or {}, rest, value)
    else:
        out[head] = value
    return out


# --- conditions -------------------------------------------------------------

@dataclass(frozen=True)
class FieldIn:
    path: str
    values: Tuple[Any, ...]

    def test(self, doc: Dict[str, Any]) -> bool:
        return get_path(doc, self.path) in self.values


# --- accumulators -----------------------------------------------------------

@dataclass(frozen=True)
class Sum:
    path: str
    when: Optional[FieldIn] = None

    def compute(self, docs: List[Dict[str, Any]]):
        total = 0.0
        for d in docs:
            if self.when is not None and not self.when.test(d):
                continue
            total += float(get_path(d, self.path) or 0.0)
        return total


@dataclass(frozen=True)
class Count:
    when: Optional[FieldIn] = None

    def compute(self, docs: List[Dict[str, Any]]):
        if self.when is None:
            return len(docs)
        return sum(1 for d in docs if self.when.test(d))


@dataclass(frozen=True)
class Avg:
    path: str

    def compute(self, docs: List[Dict[str, Any]]):
        return safe_mean(float(v) for v in (get_path(d, self.path) for d in docs) if v is not None)


@dataclass(frozen=True)
class Max:
    path: str

    def compute(self, docs: List[Dict[str, Any]]):
        values = [v for v in (get_path(d, self.path) for d in docs) if v is not None]
        return max(values) if values else None


@dataclass(frozen=True)
class Min:
    path: str

    def compute(self, docs: List[Dict[str, Any]]):
        values = [v for v in (get_path(d, self.path) for d in docs) if v is not None]
        return min(values) if values else None


@dataclass(frozen=True)
class First:
    path: str

    def compute(self, docs: List[Dict[str, Any]]):
        for d in docs:
            value = get_path(d, self.path)
            if value is not None:
                return value
        return None


@dataclass(frozen=True)
class AddToSet:
    """Distinct non-null values in first-seen order."""
    path: str

    def compute(self, docs: List[Dict[str, Any]]):
        seen: List[Any] = []
        for d in docs:
            value = get_path(d, self.path)
            if value is not None and value not in seen:
                seen.append(value)
        return seen


Accumulator = Union[Sum, Count, Avg, Max, Min, First, AddToSet]


# --- stages -----------------------------------------------------------------

@dataclass(frozen=True)
class Match:
    company_id: int
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    statuses: Optional[Tuple[str, ...]] = None

    def test(self, doc: Dict[str, Any]) -> bool:
        if doc.get('company_id') != self.company_id:
            return False
        created = doc.get('created_at')
        if self.created_from is not None and (created is None or created < self.created_from):
            return False
        if self.created_to is not None and (created is None or created > self.created_to):
            return False
        if self.statuses is not None and doc.get('status') not in self.statuses:
            return False
        return True


@dataclass(frozen=True)
class Unwind:
    """One output document per element of the array at path; empty arrays drop the document."""
    path: str


@dataclass(frozen=True)
class DateBucket:
    path: str
    fmt: str = '%Y-%m-%d'

    def key(self, doc: Dict[str, Any]):
        value = get_path(doc, self.path)
        return value.strftime(self.fmt) if value is not None else None


@dataclass(frozen=True)
class Group:
    """Group by key (dotted path, DateBucket, or None for a single group)."""
    key: Union[str, DateBucket, None]
    accumulators: Tuple[Tuple[str, Accumulator], ...]
    default_key: Any = None

    def key_of(self, doc: Dict[str, Any]):
        if self.key is None:
            return None
        if isinstance(self.key, DateBucket):
            value = self.key.key(doc)
        else:
            value = get_path(doc, self.key)
        if value is None or value == '':
            return self.default_key
        return value


@dataclass(frozen=True)
class Sort:
    """Stable multi-key sort; None values always sort last.

    Default order is amount descending then group key ascending.
    """
    fields: Tuple[Tuple[str, int], ...] = (('amount', -1), ('_id', 1))


@dataclass(frozen=True)
class Limit:
    n: int


Stage = Union[Match, Unwind, Group, Sort, Limit]


def _unwind(docs: Iterable[Dict[str, Any]], stage: Unwind):
    for doc in docs:
        for element in get_path(doc, stage.path) or []:
            yield _set_path(doc, stage.path, element)


def _group(docs: Iterable[Dict[str, Any]], stage: Group):
    buckets: Dict[Any, List[Dict[str, Any]]] = {}
    for doc in docs:
        buckets.setdefault(stage.key_of(doc), []).append(doc)
    out = []
    for key, members in buckets.items():
        row: Dict[str, Any] = {'_id': key}
        for name, acc in stage.accumulators:
            row[name] = acc.compute(members)
        out.append(row)
    return out


def _sort(docs: List[Dict[str, Any]], stage: Sort):
    for path, direction in reversed(stage.fields):
        present = [d for d in docs if get_path(d, path) is not None]
        missing = [d for d in docs if get_path(d, path) is None]
        present.sort(key=lambda d: get_path(d, path), reverse=direction < 0)
        docs = present + missing
    return docs


def run_pipeline(docs: Iterable[Dict[str, Any]], stages: Iterable[Stage]) -> List[Dict[str, Any]]:
    current: Iterable[Dict[str, Any]] = docs
    for stage in stages:
        if isinstance(stage, Match):
            current = [d for d in current if stage.test(d)]
        elif isinstance(stage, Unwind):
            current = list(_unwind(current, stage))
        elif isinstance(stage, Group):
            current = _group(current, stage)
        elif isinstance(stage, Sort):
            current = _sort(list(current), stage)
        elif isinstance(stage, Limit):
            current = list(current)[:stage.n]
        else:
            raise TypeError(f'Unsupported pipeline stage {stage!r}')
    return list(current)


def split_match(stages: Iterable[Stage]) -> Tuple[Optional[Match], Tuple[Stage, ...]]:
    """Return (leading Match or None, all stages) for stores that push the match down."""
    stages = tuple(stages)
    if stages and isinstance(stages[0], Match):
        return stages[0], stages
    return None, stages


__all__ = [
    'get_path', 'FieldIn', 'Sum', 'Count', 'Avg', 'Max', 'Min', 'First', 'AddToSet',
    'Match', 'Unwind', 'DateBucket', 'Group', 'Sort', 'Limit', 'run_pipeline', 'split_match',
]
