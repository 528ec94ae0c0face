# tests/pkghost/host/test_i18n.py
from pkghost.host import I18nTable


def test_extend_merges_and_unset_removes_owner():
    table = I18nTable({"core": {"ok": "OK"}})
    table.extend({"foo": {"menu": {"open": "Open Foo"}}})
    table.extend({"foo": {"menu": {"close": "Close Foo"}}})
    assert table.t("foo.menu.open") == "Open Foo"
    assert table.t("foo.menu.close") == "Close Foo"
    table.unset(["foo"])
    assert not table.has("foo")
    assert table.t("core.ok") == "OK"


def test_unknown_keys_render_as_key_or_default():
    table = I18nTable()
    assert table.t("foo.missing") == "foo.missing"
    assert table.t("foo.missing", "Missing") == "Missing"


def test_format_path_translates_prefixed_segments_only():
    table = I18nTable({"foo": {"menu": {"root": "Foo Tools", "open": "Open"}}})
    assert table.formatPath("i18n:foo.menu.root/i18n:foo.menu.open") == "Foo Tools/Open"
    assert table.formatPath("Plain/i18n:foo.menu.open") == "Plain/Open"
    assert table.format("no prefix") == "no prefix"


def test_snapshot_is_a_copy():
    table = I18nTable({"foo": {"a": "A"}})
    snap = table.snapshot()
    snap["foo"]["a"] = "changed"
    assert table.t("foo.a") == "A"
