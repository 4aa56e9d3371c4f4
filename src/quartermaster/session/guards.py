"""
Role-based page authorization.

Every role rule for pages lives in one table. Paths that match no rule are
open to any authenticated role.
"""
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

from quartermaster.config import RoutingSettings
from quartermaster.domain.models import Role, User
from quartermaster.exceptions import AccessDenied, ConfigError
from quartermaster.session.gate import normalize_path

DENIED_MESSAGE = "You do not have permission to access this page"

_PARAM_RE = re.compile(r"\{[^/{}]+\}")


def _compile(pattern: str) -> re.Pattern:
    parts = _PARAM_RE.split(pattern)
    body = "[^/]+".join(re.escape(part) for part in parts)
    return re.compile(f"^{body}$")


@dataclass(frozen=True)
class PageRule:
    pattern: str
    roles: frozenset[Role]
    fallback: str
    message: str = DENIED_MESSAGE
    _regex: re.Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_regex", _compile(self.pattern))

    def matches(self, path: str) -> bool:
        return bool(self._regex.match(normalize_path(path)))

    def allows(self, role: Role) -> bool:
        return role in self.roles


def rule(pattern: str, *roles: Role, fallback: str, message: str = DENIED_MESSAGE) -> PageRule:
    return PageRule(pattern=pattern, roles=frozenset(roles), fallback=fallback, message=message)


ADMIN = Role.ADMIN
COMMANDER = Role.BASE_COMMANDER
LOGISTICS = Role.LOGISTICS_OFFICER

DEFAULT_RULES: tuple[PageRule, ...] = (
    rule("/dashboard", ADMIN, COMMANDER, fallback="/assets"),
    rule("/activity-logs", ADMIN, fallback="/dashboard"),
    rule("/activity-logs/{id}", ADMIN, fallback="/dashboard"),
    rule("/settings", ADMIN, fallback="/dashboard"),
    rule("/users", ADMIN, fallback="/dashboard"),
    rule("/users/new", ADMIN, fallback="/dashboard"),
    rule("/assets/new", ADMIN, LOGISTICS, fallback="/assets",
         message="You do not have permission to create assets"),
    rule("/purchases/new", ADMIN, LOGISTICS, fallback="/purchases",
         message="You do not have permission to create purchases"),
    rule("/transfers/new", ADMIN, COMMANDER, LOGISTICS, fallback="/transfers",
         message="You do not have permission to create transfers"),
    rule("/assignments/new", ADMIN, COMMANDER, fallback="/assignments",
         message="You do not have permission to create assignments"),
    rule("/expenditures/new", ADMIN, COMMANDER, LOGISTICS, fallback="/expenditures",
         message="You do not have permission to create expenditures"),
)


class AuthorizationTable:
    def __init__(self, rules: Iterable[PageRule] = DEFAULT_RULES):
        self.rules = tuple(rules)

    def rule_for(self, path: str) -> Optional[PageRule]:
        for candidate in self.rules:
            if candidate.matches(path):
                return candidate
        return None

    def allows(self, path: str, role: Role) -> bool:
        matched = self.rule_for(path)
        return matched is None or matched.allows(role)


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    redirect_to: Optional[str] = None
    message: Optional[str] = None


class RouteGuard:
    """
    Single guard consulted for every authenticated page.

    A denial resolves straight to the first fallback the role may see, so the
    browser gets exactly one redirect even when fallbacks are themselves
    guarded (e.g. /activity-logs -> /dashboard -> /assets for logistics).
    """

    def __init__(self, table: Optional[AuthorizationTable] = None):
        self.table = table or AuthorizationTable()

    def check(self, path: str, user: Optional[User]) -> GuardDecision:
        if user is None:
            return GuardDecision(allowed=True)
        matched = self.table.rule_for(path)
        if matched is None or matched.allows(user.role):
            return GuardDecision(allowed=True)
        return GuardDecision(
            allowed=False,
            redirect_to=self.resolve_fallback(matched, user.role),
            message=matched.message,
        )

    def enforce(self, path: str, user: Optional[User]) -> None:
        decision = self.check(path, user)
        if not decision.allowed:
            raise AccessDenied(decision.message, decision.redirect_to)

    def resolve_fallback(self, denied: PageRule, role: Role) -> str:
        target = denied.fallback
        seen = {normalize_path(denied.pattern)}
        while not self.table.allows(target, role):
            if target in seen:
                raise ConfigError(f"Fallback cycle for role {role.value} at {target}")
            seen.add(target)
            target = self.table.rule_for(target).fallback
        return target


def check_route_sets(routing: RoutingSettings, table: Optional[AuthorizationTable] = None) -> list[str]:
    """
    List the ways the current routing would make the session gate or the
    guard loop. An empty list means the configuration is safe to serve.
    """
    table = table or AuthorizationTable()
    guard = RouteGuard(table)
    public = {normalize_path(p) for p in routing.public_paths}
    problems: list[str] = []

    if normalize_path(routing.login_path) not in public:
        problems.append(f"login path {routing.login_path} is not public")

    for path in sorted(public):
        matched = table.rule_for(path)
        if matched is not None:
            problems.append(f"public path {path} is also guarded by {matched.pattern}")

    landings = {"default": routing.default_landing, **routing.role_landing}
    for name, target in landings.items():
        if normalize_path(target) in public:
            problems.append(f"landing path {target} ({name}) is public")

    for role in Role:
        landing = routing.role_landing.get(role.value, routing.default_landing)
        if not table.allows(landing, role):
            problems.append(f"landing path {landing} denies {role.value}")
        for page_rule in table.rules:
            if page_rule.allows(role):
                continue
            try:
                target = guard.resolve_fallback(page_rule, role)
            except ConfigError as exc:
                problems.append(str(exc))
                continue
            if normalize_path(target) in public:
                problems.append(f"fallback {target} for {page_rule.pattern} is public")

    return problems


def ensure_route_sets(routing: RoutingSettings, table: Optional[AuthorizationTable] = None) -> None:
    problems = check_route_sets(routing, table)
    if problems:
        raise ConfigError("Unsafe routing configuration: " + "; ".join(problems))
