import talrun
from tal.tal_language import TAL_NAMESPACE


def test_renders_template_with_yaml_data(tmp_path, capsys):
    template = tmp_path / "page.xml"
    template.write_text(f'<p xmlns:tal="{TAL_NAMESPACE}" tal:content="string:Hello $name"/>', encoding="utf-8")
    data = tmp_path / "data.yaml"
    data.write_text("name: world\n", encoding="utf-8")

    assert talrun.main([str(template), str(data)]) == 0
    assert capsys.readouterr().out.strip() == "<p>Hello world</p>"


def test_xml_flag(tmp_path, capsys):
    template = tmp_path / "page.xml"
    template.write_text("<p>x</p>", encoding="utf-8")
    assert talrun.main(["--xml", str(template)]) == 0
    assert capsys.readouterr().out.startswith("<?xml")


def test_errors(tmp_path, capsys):
    assert talrun.main([]) == 2
    assert talrun.main([str(tmp_path / "missing.xml")]) == 1
    assert "file not found" in capsys.readouterr().err

    template = tmp_path / "bad.xml"
    template.write_text("<p>\n<q>\n</p>", encoding="utf-8")
    assert talrun.main([str(template)]) == 1
    assert "Error on line" in capsys.readouterr().err


def test_data_must_be_a_mapping(tmp_path, capsys):
    template = tmp_path / "page.xml"
    template.write_text("<p/>", encoding="utf-8")
    data = tmp_path / "data.json"
    data.write_text("[1, 2]", encoding="utf-8")
    assert talrun.main([str(template), str(data)]) == 1
    assert "must be a mapping" in capsys.readouterr().err
