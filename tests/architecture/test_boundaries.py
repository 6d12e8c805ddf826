from pytest_archon import archrule


def test_primitives_isolation() -> None:
    """
    Primitives layer is the lowest level.
    It must not import from ports, middleware, the engine or the composer.
    """
    (
        archrule("primitives_isolation")
        .match("composer_core.primitives*")
        .should_not_import("composer_core.ports*")
        .should_not_import("composer_core.middleware*")
        .should_not_import("composer_core.engine")
        .should_not_import("composer_core.composer")
        .check("composer_core")
    )


def test_ports_layering() -> None:
    """
    Ports describe middleware shapes only.
    They must not depend on anything that runs middleware.
    """
    (
        archrule("ports_layering")
        .match("composer_core.ports*")
        .should_not_import("composer_core.middleware*")
        .should_not_import("composer_core.engine")
        .should_not_import("composer_core.composer")
        .check("composer_core")
    )


def test_building_blocks_do_not_depend_on_composer() -> None:
    """
    flatten/concat and the engine sit below the Composer.
    """
    (
        archrule("middleware_layering")
        .match("composer_core.middleware*")
        .should_not_import("composer_core.composer")
        .check("composer_core")
    )
    (
        archrule("engine_layering")
        .match("composer_core.engine")
        .should_not_import("composer_core.composer")
        .should_not_import("composer_core.middleware*")
        .check("composer_core")
    )


def test_core_is_transport_agnostic() -> None:
    """
    The core defines no transport; hosts bring their own.
    """
    (
        archrule("transport_agnostic")
        .match("composer_core*")
        .should_not_import("starlette*")
        .should_not_import("fastapi*")
        .should_not_import("aiohttp*")
        .should_not_import("httpx*")
        .check("composer_core")
    )
