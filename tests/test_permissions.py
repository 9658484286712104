import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

import pytest

from capguard import (
    InvalidArgumentError,
    MissingInputError,
    Permission,
    TemplateConfig,
    create_group,
    create_group_set,
    create_set,
    create_user,
    create_user_set,
    decompose,
    match_group,
    match_user,
    permission_set,
)


def test_create_permission() -> None:
    assert Permission("read").name == "read"
    assert Permission.create("read") == Permission("read")


@pytest.mark.parametrize("raw", ["read", "  read", "read  ", "\tread\n"])
def test_name_is_trimmed(raw) -> None:
    assert Permission.create(raw).name == "read"


@pytest.mark.parametrize("raw", ["", " ", "\t\n"])
def test_blank_name_rejected(raw) -> None:
    with pytest.raises(InvalidArgumentError):
        Permission(raw)
    # still a ValueError for generic handlers
    with pytest.raises(ValueError):
        Permission.create(raw)


def test_none_name_rejected() -> None:
    with pytest.raises(MissingInputError):
        Permission(None)
    with pytest.raises(TypeError):
        Permission.create(None)


def test_non_string_name_rejected() -> None:
    with pytest.raises(TypeError):
        Permission(42)


def test_equality_by_name() -> None:
    assert Permission("write") == Permission(" write ")
    assert hash(Permission("write")) == hash(Permission("write"))
    assert Permission("write") != Permission("read")
    assert str(Permission("write")) == "write"


def test_permission_is_immutable() -> None:
    perm = Permission("read")
    with pytest.raises(AttributeError):
        perm.name = "write"


def test_create_set() -> None:
    perms = create_set("read", "write", "execute")
    assert perms == {Permission("read"), Permission("write"), Permission("execute")}

    perms = Permission.create_set("read", "write", "read", "execute", "write")
    assert len(perms) == 3

    assert create_set("a", "a", "b") == {Permission("a"), Permission("b")}
    assert create_set("a", " a ") == {Permission("a")}


def test_create_set_from_iterable() -> None:
    assert create_set(["read", "write"]) == create_set("read", "write")
    assert create_set([]) == frozenset()
    assert create_set() == frozenset()


def test_create_set_propagates_failure() -> None:
    with pytest.raises(MissingInputError):
        create_set("read", "write", None)
    with pytest.raises(InvalidArgumentError):
        create_set("read", "write", "")


def test_permission_set_flattens() -> None:
    read, write = Permission("read"), Permission("write")
    assert permission_set(read, [write], {read}) == {read, write}
    assert permission_set() == frozenset()
    with pytest.raises(TypeError):
        permission_set(["read"])


def test_decompose() -> None:
    assert decompose(Permission("write")) == "write"
    assert decompose(None) is None


def test_user_permission_round_trip() -> None:
    perm = create_user("guest")
    assert perm.name == "<[[user=(guest)]]>"
    assert match_user(perm) == "guest"
    assert match_user(create_user("  guest ")) == "guest"


def test_group_permission_round_trip() -> None:
    perm = create_group("staff")
    assert perm.name == "<[[group=(staff)]]>"
    assert match_group(perm) == "staff"


@pytest.mark.parametrize("ident", ["guest", "a b", "x)]]>y", "(", "user=(z)", "é"])
def test_identifiers_with_template_characters(ident) -> None:
    assert match_user(create_user(ident)) == ident
    assert match_group(create_group(ident)) == ident


def test_identity_templates_do_not_cross_match() -> None:
    assert match_group(create_user("guest")) is None
    assert match_user(create_group("staff")) is None


@pytest.mark.parametrize(
    "name",
    ["read", "<[[user=()]]>", "<[[user=(guest)]]>!", "x<[[user=(guest)]]>", "user=(guest)"],
)
def test_plain_permissions_do_not_match(name) -> None:
    assert match_user(Permission(name)) is None


def test_match_ignores_non_permissions() -> None:
    assert match_user(None) is None
    assert match_group("<[[group=(staff)]]>") is None


def test_identity_factories_reject_bad_ids() -> None:
    with pytest.raises(MissingInputError):
        create_user(None)
    with pytest.raises(InvalidArgumentError):
        create_user("  ")
    with pytest.raises(MissingInputError):
        create_group(None)
    with pytest.raises(InvalidArgumentError):
        create_group("")


def test_create_user_set() -> None:
    perms = create_user_set("ishmael", "isaac", "ishmael", "guest", "isaac")
    assert perms == {create_user("ishmael"), create_user("isaac"), create_user("guest")}
    assert create_user_set([]) == frozenset()
    with pytest.raises(MissingInputError):
        create_user_set("ishmael", "isaac", None)


def test_create_group_set() -> None:
    perms = create_group_set(["staff", "admin"], "developers", "admin")
    assert perms == {create_group("staff"), create_group("admin"), create_group("developers")}
    with pytest.raises(MissingInputError):
        create_group_set("staff", None)


def test_explicit_config() -> None:
    config = TemplateConfig.from_strings(user="u:{}", group="g:{}")
    perm = create_user("guest", config)
    assert perm == Permission("u:guest")
    assert match_user(perm, config) == "guest"
    assert match_user(perm) is None
    assert match_group(create_group("staff", config), config) == "staff"
