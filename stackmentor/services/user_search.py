"""Filtro de búsqueda de usuarios.

Cada criterio es opcional e independiente: si no viene (o viene en blanco) no
se genera cláusula y por tanto no excluye a nadie. Las cláusulas presentes se
combinan siempre con AND, empezando por "solo usuarios verificados".

Esto es puro: no toca la BD, solo construye la expresión para ``select(User).where(...)``.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from sqlalchemy import String, and_, func, or_, true
from sqlalchemy.sql.elements import ColumnElement

from stackmentor.core.errors import InvalidArgument
from stackmentor.models.user import User

_WHITESPACE = re.compile(r"\s+")
_OPEN_RANGE = re.compile(r"^(\d{1,3})\s*\+$")
_CLOSED_RANGE = re.compile(r"^(\d{1,3})\s*-\s*(\d{1,3})$")


def _lower(column):
    return func.lower(column, type_=String)


def _contains(column, term: str) -> ColumnElement[bool]:
    # % y _ que escriba el usuario son texto, no comodines
    return _lower(column).contains(term, autoescape=True)


@dataclass(frozen=True)
class VerifiedOnly:
    def to_sql(self) -> ColumnElement[bool]:
        return User.is_verified.is_(True)


@dataclass(frozen=True)
class NameMatch:
    first: str
    last: str
    require_both: bool

    def to_sql(self) -> ColumnElement[bool]:
        first = _contains(User.first_name, self.first)
        last = _contains(User.last_name, self.last)
        return and_(first, last) if self.require_both else or_(first, last)


@dataclass(frozen=True)
class RoleMatch:
    role: str

    def to_sql(self) -> ColumnElement[bool]:
        return _lower(User.role) == self.role


@dataclass(frozen=True)
class ExperienceRange:
    min_years: Optional[int]
    max_years: Optional[int]

    def to_sql(self) -> ColumnElement[bool]:
        years = User.years_of_experience
        if self.min_years is not None and self.max_years is not None:
            return years.between(self.min_years, self.max_years)
        if self.min_years is not None:
            return years >= self.min_years
        return years <= self.max_years


@dataclass(frozen=True)
class IndustrySet:
    industries: frozenset[str]

    def to_sql(self) -> ColumnElement[bool]:
        return _lower(User.industry).in_(sorted(self.industries))


Clause = Union[VerifiedOnly, NameMatch, RoleMatch, ExperienceRange, IndustrySet]


@dataclass(frozen=True)
class UserFilter:
    clauses: tuple[Clause, ...]

    def where(self) -> ColumnElement[bool]:
        if not self.clauses:
            return true()
        return and_(*(clause.to_sql() for clause in self.clauses))


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def name_clause(search_text: Optional[str]) -> Optional[NameMatch]:
    if _is_blank(search_text):
        return None

    text = search_text.strip().lower()
    parts = _WHITESPACE.split(text, maxsplit=1)
    if len(parts) == 2:
        # "john smith" -> nombre Y apellido
        return NameMatch(first=parts[0], last=parts[1], require_both=True)
    # una sola palabra -> nombre O apellido
    return NameMatch(first=text, last=text, require_both=False)


def role_clause(role: Optional[str]) -> Optional[RoleMatch]:
    if _is_blank(role):
        return None
    return RoleMatch(role=role.strip().lower())


def experience_clause(min_years: Optional[int], max_years: Optional[int]) -> Optional[ExperienceRange]:
    if min_years is None and max_years is None:
        return None
    return ExperienceRange(min_years=min_years, max_years=max_years)


def industry_clause(industries: Optional[Iterable[str]]) -> Optional[IndustrySet]:
    if not industries:
        return None
    lowered = frozenset(i.strip().lower() for i in industries if i and i.strip())
    if not lowered:
        return None
    return IndustrySet(industries=lowered)


def build_search_filter(
    search_text: Optional[str] = None,
    role: Optional[str] = None,
    min_years: Optional[int] = None,
    max_years: Optional[int] = None,
    industries: Optional[Iterable[str]] = None,
) -> UserFilter:
    optional = (
        name_clause(search_text),
        role_clause(role),
        experience_clause(min_years, max_years),
        industry_clause(industries),
    )
    return UserFilter(clauses=(VerifiedOnly(),) + tuple(c for c in optional if c is not None))


def parse_experience_range(text: Optional[str]) -> tuple[Optional[int], Optional[int]]:
    """``"5+"`` -> (5, None), ``"2-5"`` -> (2, 5), vacío -> (None, None).

    Cualquier otro formato es un error, no un filtro que no filtra. Los años
    van de 0 a 999.
    """
    if _is_blank(text):
        return None, None

    raw = text.strip()
    m = _OPEN_RANGE.match(raw)
    if m:
        return int(m.group(1)), None

    m = _CLOSED_RANGE.match(raw)
    if m:
        return int(m.group(1)), int(m.group(2))

    raise InvalidArgument(f"Invalid experience range format: {text}")
