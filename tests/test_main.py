from shop_service import main as main_module


def test_main_builds_schema_seeds_and_reports(engine, session_factory, monkeypatch):
    monkeypatch.setattr(main_module, "engine", engine)
    monkeypatch.setattr(main_module, "SessionLocal", session_factory)

    report = main_module.main()
    assert len(report.orders) == 20

    # Running again resets rather than colliding on primary keys.
    report = main_module.main()
    assert len(report.users) == 5
