import logging

import pytest
import yaml

from microed.nanorc import (
    MultiRule,
    SingleRule,
    encode_header,
    generate_yaml,
    join_rule,
    main,
    parse_nanorc,
    write_headers,
)
from microed.syntax import (
    SyntaxDefinitionError,
    make_header,
    make_header_yaml,
    parse_def,
    parse_file,
)

NANORC = r'''## Go syntax
syntax "go" "\.go$" "\.gox$"
header "^package" "^// Code"
color green "\<(func|var)\>" "\<type\>"
color brightred (i) "todo"
color blue start="/\*" end="\*/"

# trailing comment
'''

SYNTAX_YAML = 'filetype: go\n\ndetect:\n    filename: "\\\\.go$"\n    signature: "^package"\n\nrules: []\n'


def test_join_rule():
    assert join_rule('a" "b" "c') == "a|b|c"
    assert join_rule("single") == "single"


def test_parse_nanorc():
    filetype, syntax, header, rules = parse_nanorc(NANORC, "go.nanorc")
    assert filetype == "go"
    assert syntax == r"\.go$|\.gox$"
    assert header == r"^package|^// Code"
    assert rules == [
        SingleRule("green", r"\<(func|var)\>|\<type\>"),
        SingleRule("brightred", "(?i)todo"),
        MultiRule("blue", r"/\*", r"\*/"),
    ]


def test_invalid_statements_are_reported(caplog):
    with caplog.at_level(logging.WARNING, logger="microed.nanorc"):
        filetype, syntax, header, rules = parse_nanorc(
            'syntax go\nheader nothing\ncolor red "x"\n', "bad.nanorc"
        )
    assert (filetype, syntax, header) == ("", "", "")
    assert rules == [SingleRule("red", "x")]
    assert caplog.messages[0].startswith("bad.nanorc 0 ")
    assert any("Syntax statement is not valid: syntax go" in m for m in caplog.messages)
    assert any("Header statement is not valid: header nothing" in m for m in caplog.messages)


def test_generate_yaml_round_trips_through_yaml():
    rules = [SingleRule("green", r'\<"quoted"\>'), MultiRule("blue", r"/\*", r"\*/")]
    text = generate_yaml("go", r"\.go$", r'^package "x"', rules)
    assert yaml.safe_load(text) == {
        "filetype": "go",
        "detect": {"filename": r"\.go$", "signature": r'^package "x"'},
        "rules": [
            {"green": r'\<"quoted"\>'},
            {"blue": {"start": r"/\*", "end": r"\*/", "rules": []}},
        ],
    }


def test_generate_yaml_without_header():
    text = generate_yaml("go", "x", "", [])
    assert text.startswith("filetype: go\n\ndetect: \n")
    assert yaml.safe_load(text)["detect"] == {"filename": "x"}


def test_generate_yaml_rejects_unknown_rules():
    with pytest.raises(TypeError):
        generate_yaml("go", "x", "", ["oops"])


def test_converted_file_is_a_valid_syntax_definition():
    text = generate_yaml(*parse_nanorc(NANORC, "go.nanorc"))
    header = make_header_yaml(text)
    assert header.file_type == "go"
    assert header.match_file_name("main.go")
    assert header.match_file_signature("package main")
    definition = parse_def(parse_file(text), header)
    assert len(definition.rules.patterns) == 2
    assert len(definition.rules.regions) == 1


def test_encode_header_lines():
    assert encode_header(SYNTAX_YAML) == "go\n\\.go$\n^package\n"


def test_encode_header_round_trips_with_yaml_header():
    from_hdr = make_header(encode_header(SYNTAX_YAML))
    from_yaml = make_header_yaml(SYNTAX_YAML)
    assert from_hdr.file_type == from_yaml.file_type
    assert from_hdr.file_name_regex.pattern == from_yaml.file_name_regex.pattern
    assert from_hdr.signature_regex.pattern == from_yaml.signature_regex.pattern


def test_encode_header_without_detect():
    header = make_header(encode_header(b"filetype: txt\n"))
    assert header.file_type == "txt"
    assert header.file_name_regex is None
    assert not header.has_file_signature()


@pytest.mark.parametrize("source", ["filetype: [unclosed", "- a\n- b\n", "detect: 3\n"])
def test_encode_header_rejects_bad_input(source):
    with pytest.raises(SyntaxDefinitionError):
        encode_header(source)


def test_write_headers(tmp_path):
    (tmp_path / "go.yaml").write_text(SYNTAX_YAML, encoding="utf-8")
    (tmp_path / "notes.txt").write_text("filetype: nope\n", encoding="utf-8")
    written = write_headers(tmp_path)
    assert written == [tmp_path / "go.hdr"]
    assert (tmp_path / "go.hdr").read_text(encoding="utf-8") == encode_header(SYNTAX_YAML)
    assert not (tmp_path / "notes.hdr").exists()


def test_main_convert(tmp_path, capsys):
    source = tmp_path / "go.nanorc"
    source.write_text(NANORC, encoding="utf-8")
    assert main(["convert", str(source)]) == 0
    assert capsys.readouterr().out == generate_yaml(*parse_nanorc(NANORC, str(source)))


def test_main_convert_missing_file(tmp_path, capsys):
    assert main(["convert", str(tmp_path / "missing.nanorc")]) == 1
    assert capsys.readouterr().err != ""


def test_main_headers(tmp_path):
    (tmp_path / "go.yaml").write_text(SYNTAX_YAML, encoding="utf-8")
    assert main(["headers", str(tmp_path)]) == 0
    assert (tmp_path / "go.hdr").read_text(encoding="utf-8") == encode_header(SYNTAX_YAML)


def test_main_requires_a_command():
    with pytest.raises(SystemExit):
        main([])