"""Tests for the Rich console factory."""

from graphkeep.output.console import (
    GK_THEME,
    create_console,
    field_style,
    get_output,
    severity_style,
)


class TestConsole:
    def test_renders_to_buffer(self) -> None:
        console = create_console(no_color=True)
        console.print("[gk.ok]OK[/gk.ok] done")
        assert get_output(console) == "OK done\n"

    def test_width_override(self) -> None:
        assert create_console(width=60).width == 60

    def test_theme_styles(self) -> None:
        for name in ("gk.ok", "gk.error", "gk.warning", "gk.id", "gk.count"):
            assert name in GK_THEME.styles


class TestStyles:
    def test_field_style(self) -> None:
        assert field_style("edge_id") == "gk.id"
        assert field_style("previous") == "gk.path"
        assert field_style("node_count") == "gk.count"
        assert field_style("scale") == ""

    def test_severity_style(self) -> None:
        assert severity_style("error") == "gk.error"
        assert severity_style("info") == ""
