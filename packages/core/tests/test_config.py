import pydantic
import pytest

from composer_core import Composer, ComposerConfig


def test_default_config() -> None:
    config = Composer().config

    assert config.name == "composer"
    assert config.instrumented is True


def test_config_is_frozen() -> None:
    config = ComposerConfig(name="app")

    with pytest.raises(pydantic.ValidationError):
        config.name = "other"  # type: ignore[misc]


def test_children_inherit_config() -> None:
    config = ComposerConfig(name="app", instrumented=False)
    composer = Composer(config=config)

    children = [
        composer.use(),
        composer.before(),
        composer.fork(),
        composer.lazy(lambda ctx: []),
        composer.filter(lambda ctx: True),
        composer.branch(lambda ctx: True, [], []),
    ]

    assert all(child.config is config for child in children)
    assert repr(composer) == "Composer(name='app')"
