import pytest

from beanwire.definitions import DefinitionResolver
from beanwire.domain import (
    SELF,
    AliasDefinition,
    BeanDefinition,
    FactoryDefinition,
    InitOperation,
    Reference,
)
from beanwire.errors import InvalidDefinitionError, NoDefinitionFoundError


def factory(container):
    return "built"


@pytest.fixture
def resolver() -> DefinitionResolver:
    return DefinitionResolver(
        {
            "base": {"abstract": True, "class": "Base"},
            "child": {"extends": "base"},
            "grandparent": {"abstract": True, "class": "Base", "instanceof": ["Marker"]},
            "parent": {
                "abstract": True,
                "extends": "grandparent",
                "constructor_args": [1],
            },
            "grandchild": {"extends": "parent", "class": "Derived"},
            "alias": {"alias": "child"},
            "factory": factory,
        }
    )


def test_extends_merges_parent_and_drops_abstract_and_extends(resolver):
    assert resolver.resolve("child") == {"class": "Base"}


def test_extends_chain_is_flattened_with_child_overriding(resolver):
    assert resolver.resolve("grandchild") == {
        "class": "Derived",
        "instanceof": ["Marker"],
        "constructor_args": [1],
    }


def test_resolving_as_parent_keeps_own_abstract_flag(resolver):
    assert resolver.resolve("parent", abstract=True)["abstract"] is True


def test_definition_variants(resolver):
    assert resolver.definition_for("factory") == FactoryDefinition("factory", factory)
    assert resolver.definition_for("alias") == AliasDefinition("alias", "child")
    assert resolver.definition_for("grandchild") == BeanDefinition(
        "grandchild", "Derived", None, (1,), (), ("Marker",)
    )


def test_init_and_references_are_parsed():
    resolver = DefinitionResolver(
        {
            "bean": {
                "class": "Thing",
                "constructor_args": ["reference-to:other", "plain"],
                "init": {
                    "prop:owner": "reference-to:self",
                    "call:add": ["reference-to:other"],
                    "reset": [],
                },
                "instanceof": "Marker",
            }
        }
    )

    definition = resolver.definition_for("bean")

    assert definition.constructor_args == (Reference("other"), "plain")
    assert definition.init == (
        InitOperation("property", "owner", SELF),
        InitOperation("call", "add", [Reference("other")]),
        InitOperation("call", "reset", []),
    )
    assert definition.instanceof == ("Marker",)


def test_string_references_can_be_left_alone():
    resolver = DefinitionResolver(
        {"bean": {"class": "Thing", "constructor_args": ["reference-to:other"]}},
        string_references=False,
    )

    assert resolver.definition_for("bean").constructor_args == ("reference-to:other",)


def test_missing_definition_raises(resolver):
    with pytest.raises(NoDefinitionFoundError, match="definition for bean 'nope'"):
        resolver.resolve("nope")


def test_missing_parent_raises():
    resolver = DefinitionResolver({"child": {"extends": "nope"}})

    with pytest.raises(NoDefinitionFoundError, match="'nope'"):
        resolver.resolve("child")


def test_parent_must_be_abstract():
    resolver = DefinitionResolver(
        {"parent": {"class": "Base"}, "child": {"extends": "parent"}}
    )

    with pytest.raises(InvalidDefinitionError, match="'parent' must be abstract"):
        resolver.resolve("child")


def test_callable_cannot_be_a_parent():
    resolver = DefinitionResolver({"parent": factory, "child": {"extends": "parent"}})

    with pytest.raises(InvalidDefinitionError, match="must be abstract"):
        resolver.resolve("child")


def test_alias_must_be_only_entry():
    resolver = DefinitionResolver({"alias": {"alias": "x", "class": "Base"}})

    with pytest.raises(InvalidDefinitionError, match="must only have the 'alias' entry"):
        resolver.resolve("alias")


def test_alias_cannot_extend():
    resolver = DefinitionResolver(
        {"base": {"abstract": True, "class": "Base"}, "alias": {"alias": "x", "extends": "base"}}
    )

    with pytest.raises(InvalidDefinitionError, match="must only have the 'alias' entry"):
        resolver.resolve("alias")


def test_abstract_definition_cannot_be_built(resolver):
    with pytest.raises(InvalidDefinitionError, match="'base' can not be abstract"):
        resolver.definition_for("base")


def test_class_is_required():
    resolver = DefinitionResolver({"bean": {"constructor_args": [1]}})

    with pytest.raises(InvalidDefinitionError, match="must have a 'class' entry"):
        resolver.resolve("bean")


def test_abstract_parent_need_not_have_class():
    resolver = DefinitionResolver(
        {
            "parent": {"abstract": True, "constructor_args": [1]},
            "child": {"extends": "parent", "class": "Thing"},
        }
    )

    assert resolver.resolve("child") == {"constructor_args": [1], "class": "Thing"}


def test_unknown_entries_raise():
    resolver = DefinitionResolver({"bean": {"class": "Thing", "clas": "Typo"}})

    with pytest.raises(InvalidDefinitionError, match=r"unknown entries \['clas'\]"):
        resolver.resolve("bean")


def test_definition_must_be_mapping_or_callable():
    resolver = DefinitionResolver({"bean": "Thing"})

    with pytest.raises(InvalidDefinitionError, match="must be a mapping or a callable"):
        resolver.resolve("bean")


def test_extends_loop_raises():
    resolver = DefinitionResolver(
        {
            "a": {"abstract": True, "extends": "b"},
            "b": {"abstract": True, "extends": "a"},
            "c": {"extends": "a"},
        }
    )

    with pytest.raises(InvalidDefinitionError, match="extends itself: c -> a -> b -> a"):
        resolver.resolve("c")


def test_non_callable_builder_raises():
    resolver = DefinitionResolver({"bean": {"class": "Thing", "builder": "make_thing"}})

    with pytest.raises(InvalidDefinitionError, match="not callable"):
        resolver.definition_for("bean")


def test_malformed_init_entry_raises():
    resolver = DefinitionResolver({"bean": {"class": "Thing", "init": ["set_x"]}})

    with pytest.raises(InvalidDefinitionError, match="not an \\(operation, value\\) pair"):
        resolver.definition_for("bean")


def test_init_entries_may_be_single_entry_mappings():
    resolver = DefinitionResolver(
        {"bean": {"class": "Thing", "init": [{"set_x": 1}, {"prop:y": "reference-to:other"}]}}
    )

    assert resolver.definition_for("bean").init == (
        InitOperation("call", "set_x", 1),
        InitOperation("property", "y", Reference("other")),
    )


def test_init_entry_mapping_with_several_keys_raises():
    resolver = DefinitionResolver(
        {"bean": {"class": "Thing", "init": [{"op": "set_x", "value": 1}]}}
    )

    with pytest.raises(InvalidDefinitionError, match="must map exactly one operation") as error:
        resolver.definition_for("bean")

    assert error.value.bean_name == "bean"


def test_init_entry_string_raises():
    resolver = DefinitionResolver({"bean": {"class": "Thing", "init": ["xy"]}})

    with pytest.raises(InvalidDefinitionError, match="not an \\(operation, value\\) pair"):
        resolver.definition_for("bean")


def test_names_to_test_skips_abstract_definitions(resolver):
    assert resolver.names_to_test() == ["child", "grandchild", "alias", "factory"]
