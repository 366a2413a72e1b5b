# microed

Building blocks for a terminal text editor, usable on their own:

- **`microed.chars`**: Unicode handling in which a character is a base code
  point together with any combining marks after it (`is_mark`,
  `decode_character`, `iter_characters`, `character_count`).
- **`microed.util`**: text and path helpers. These include character-aware
  slicing (`slice_start`, `slice_end`), visual width with tab stops
  (`string_width`, `slice_visual_end`, `get_char_pos_in_line`), word and
  whitespace tests (`is_word_char`, `is_whitespace`, `get_leading_whitespace`,
  `get_trailing_whitespace`, ...), `get_path_and_cursor_position` for
  arguments such as `file.py:10:5`, `replace_home`, `make_relative`,
  `escape_path`, `parse_bool` (which also accepts `on` and `off`), `clamp` and
  an `unzip` that refuses entries that would land outside the target
  directory.
- **`microed.splits`**: a tree of window splits (`new_root`, `Node.vsplit`,
  `Node.hsplit`, `Node.resize`, `Node.resize_split`, `Node.unsplit`,
  `Node.get_node`). `str(node)` prints the tree.
- **`microed.syntax`**: loading of YAML syntax definitions and three-line
  `.hdr` header files (`parse_file`, `parse_def`, `make_header`,
  `make_header_yaml`, `get_includes`, `has_includes`, `resolve_includes`).
  Problems in a definition raise `SyntaxDefinitionError`.
- **`microed.highlighter`**: a region-aware syntax highlighter (`Highlighter`).
- **`microed.nanorc`**: conversion of nanorc syntax files into YAML
  definitions (`parse_nanorc`, `generate_yaml`) and generation of `.hdr` files
  from YAML definitions (`encode_header`, `write_headers`).
- **`microed.buildinfo`**: build version worked out from git tags
  (`git_version`, `compute_version`) and a build date (`build_date`).

## Installation

```
pip install .
```

Use `pip install .[test]` to install the test tools as well.

## Examples

Characters and visual widths:

```python
from microed.chars import character_count
from microed.util import string_width, get_path_and_cursor_position

character_count("e\u0301te")                   # 3: the accent joins the "e"
string_width("\thello", 3, 4)                  # width of a tab followed by "he"
get_path_and_cursor_position("util.py:10:5")   # ("util.py", ["10", "5"])
get_path_and_cursor_position("util.py:10")     # ("util.py", ["10", "0"])
```

Splits:

```python
from microed.splits import new_root

root = new_root(0, 0, 80, 24)
right_id = root.vsplit(True)
root.get_node(right_id).hsplit(True)
root.resize(120, 40)
print(root)
```

Syntax highlighting:

```python
from pathlib import Path
from microed.syntax import parse_file, parse_def, make_header_yaml
from microed.highlighter import Highlighter

data = Path("go.yaml").read_bytes()
definition = parse_def(parse_file(data), make_header_yaml(data))
matches = Highlighter(definition).highlight_string('x := "text" // comment')
```

Each element of `matches` is a dict from a character index in a line to the
group id that starts there; `microed.syntax.GROUPS.name_of(group)` gives the
group's name.

To highlight a buffer incrementally, pass an object following the
`LineStates` protocol (`__len__`, `line`, `state`, `set_state`, `set_match`)
to `highlight_states`, `highlight_matches`, `rehighlight_states` and
`rehighlight_line`.

## Commands

Convert a nanorc syntax file into a YAML syntax definition, written to
standard output:

```
microed-nanorc convert go.nanorc > go.yaml
```

Write a `.hdr` header file next to every `.yaml` file in a directory (the
current directory by default):

```
microed-nanorc headers runtime/syntax
```

Print the version of the git checkout in the current directory, or the build
date (taken from `SOURCE_DATE_EPOCH` when it is set):

```
microed-buildinfo version
microed-buildinfo date
```

## What it does not do

This package holds no editor of its own: there is no screen drawing, no
buffer or file editing, no key bindings, no colour schemes and no plugin
system. It ships no syntax definitions; the YAML files given to
`microed.syntax` must come from elsewhere.

## Running the tests

```
pytest
```