import sys


def test_batch_cli_does_not_import_nicegui(tmp_path, sample_csv):
    """A --batch run must work without loading the GUI stack.

    NiceGUI may be installed in the environment. This test ensures that the
    batch path never pulls nicegui into sys.modules.
    """
    nicegui_modules = [k for k in list(sys.modules.keys()) if k.startswith("nicegui")]
    graph_app_modules = [k for k in list(sys.modules.keys()) if k == "tgrapher.app.graph_app"]
    saved = {k: sys.modules.pop(k) for k in nicegui_modules + graph_app_modules}
    try:
        from tgrapher.app import cli

        code = cli.main([str(sample_csv), "-", "energy", "tof", "--batch", "--config", str(tmp_path / "c.json")])
        assert code == 0
        assert not any(k.startswith("nicegui") for k in sys.modules.keys())
    finally:
        sys.modules.update(saved)
