from __future__ import annotations


def test_package_paths_work() -> None:
    import badgereg
    from badgereg.api import create_api_app
    from badgereg.api.routes import mount_admin_api, mount_badges_api
    from badgereg.core.registry import BadgeRegistry
    from badgereg.runtime.server import BadgeRegServer, run
    from badgereg.sdk.client import BadgeRegClient

    assert badgereg.run is run
    assert badgereg.BadgeRegistry is BadgeRegistry
    assert badgereg.BadgeRegClient is BadgeRegClient
    assert create_api_app is not None
    assert mount_badges_api is not None
    assert mount_admin_api is not None
    assert BadgeRegServer is not None
