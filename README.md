# bomtool

Tools for working with bills of materials (BOMs): merge two parts lists
into a synthesized list, keep an override list, normalize settings and
column dictionaries, save working sessions as JSON snapshots, and export
parts lists as CSV, text and simple CAD listings.

The package uses only the Python standard library and supports Python 3.10
and later.

## Data model

`bomtool.models` holds plain dataclasses for everything the tool works with:
`BomData` and `BomRow` for a parts list, `ColumnMapping` for where the part
number, model number and manufacturer columns are, `SynthesisResult` and
`ComparisonResult` for results, `RegisteredNameList`, `OverrideList`,
`AppSettings` and `ColumnDictionary`. These types have a `from_dict` class
method that checks field types and raises `ValueError` on bad data, and
`to_dict` turns any model instance back into JSON-ready data.
`ColumnDictionary.entry_for` and `patterns_for` look up a column type
ignoring case and surrounding blanks.

```python
from bomtool.models import BomData, to_dict

bom_a = BomData.from_dict({
    "headers": ["Part", "Model"],
    "rows": [
        {"part_number": "R1", "model_number": "RC0603-10K", "attributes": {}},
        {"part_number": "C1", "model_number": "GRM188-100N", "attributes": {}},
    ],
})
print(to_dict(bom_a))
```

## Synthesizing two parts lists

`bomtool.synthesis.perform_synthesis` joins two lists on part number. Every
part appears once, sorted by part number, with the status `common`,
`missing_a` or `missing_b`.

```python
from bomtool.synthesis import perform_synthesis, get_synthesis_stats, collect_missing_parts

result = perform_synthesis(bom_a, bom_b)
stats = get_synthesis_stats(result)      # {"total": ..., "common": ..., "missing_a": ..., "missing_b": ...}
missing_a, missing_b = collect_missing_parts(result)
```

`filter_synthesis_result(result, status)` keeps the rows with a given status
(case-insensitive; `None` or a blank status keeps all). `status_text` gives
the Japanese label for a status. `save_synthesis_result(result, path, "csv")`
writes a UTF-8 CSV with a byte order mark; `"txt"` writes a report with the
totals followed by the part list. Any other format raises `ValueError`.

## File output

`bomtool.file_handler` provides:

- `save_csv_file(rows, path, encoding)` and `save_txt_file(text, path, encoding)`,
  for `"utf-8"` or `"shift-jis"` (CSV in UTF-8 starts with a byte order mark;
  any other encoding name is written as UTF-8);
- `save_parts_saver_format`, which writes the header row and, for each part,
  its attribute values followed by a blank row;
- `save_part_eco_format`, `save_part_ccf_format` and `save_part_msf_format`,
  which write a short comment header and one `part;model`, `CCF:part:model`
  or `MSF:part:model` line per part;
- `save_dictionary` / `load_dictionary` for a JSON map of part number to
  model number (a missing file loads as an empty map);
- `get_current_date_string()` (`YYYYMMDD`) and
  `add_timestamp_to_filename(path, prefix)`, which renames `dir/file.csv` to
  `dir/<prefix>_<date>_file.csv`.

## Settings and column dictionary

`bomtool.settings.normalize_settings` trims and de-duplicates maker names and
format rules; blank maker names are rejected and the allowed rule actions are
`copy_above`, `expand_range`, `replace_with` and `ignore`.
`normalize_dictionary` merges entries of the same column type, drops blank
and case-duplicate patterns and sorts them; an empty dictionary becomes
`default_column_dictionary()`, the built-in patterns for part number, model
number and manufacturer. `load_settings`, `write_settings`, `load_dictionary`
and `write_dictionary` read and write them as JSON; loading a missing
dictionary file writes the default one. Invalid input raises `SettingsError`.

## Sessions

`bomtool.session.SessionStore` keeps snapshots as JSON files under a root
directory, in an `auto` and a `manual` subdirectory. A snapshot saved without
an id gets one made from the current time and eight random characters.
Automatic sessions are pruned to the ten newest; unreadable files are skipped
when listing.

```python
from bomtool.session import SessionStore, SessionKind

store = SessionStore("sessions")
for summary in store.collect(SessionKind.MANUAL):
    print(summary.id, summary.label, summary.created_at)
```

`parse_session_kind("auto")` / `("manual")` turns a name into a
`SessionKind`; failures raise `SessionError`.

## CAD export

`bomtool.cad` builds PADS, BD and PWS listings from a parts list
(`CadFormat.parse` accepts the names in any case). `build_cad_output` returns
the lines, followed by an attribute section when the list has headers.
`generate_cad_file` writes the file and returns its path; a path without an
extension gets the format's one, and without a path the file gets a
timestamped name under the given base directory. An empty parts list or an
unknown format raises `CadError`.

## Application state

`bomtool.app.AppState` ties it together for a front end. It holds the two
parts lists, results, registered names and overrides, and keeps its files
under its root directory: settings in `sessions/settings/bom_settings.json`,
the column dictionary in `dictionary/custom_dict.json` (created with the
defaults on first use), sessions in `sessions/auto` and `sessions/manual`,
and CAD exports in `sessions/cad`. After each change to the loaded lists or
overrides it saves an automatic session, as long as at least one list is
loaded. Failed operations raise `CommandError`.

```python
from bomtool.app import AppState

state = AppState("workspace")
state.update_bom_data("a", bom_a)
state.update_bom_data("b", bom_b)
result = state.synthesize_boms()
state.save_synthesis("synthesis.csv", "csv")
state.save_manual_session("before review")
```

Other commands cover settings and dictionary import/export
(`save_settings`, `import_settings`, `export_settings`,
`save_column_dictionary`, `import_column_dictionary`,
`export_column_dictionary`), overrides (`set_overrides`), clearing
(`clear_data("all")` or `clear_data("session_keep")`), sessions
(`list_sessions`, `restore_session`, `delete_session`) and
`generate_cad_file`.

## What the package does not do

- It does not read parts lists from CSV or spreadsheet files, or suggest
  column mappings; lists are built in code or with `BomData.from_dict`.
- It does not compute comparisons between two lists. `ComparisonResult` can
  be held and stored in sessions, but nothing here produces one.
- It does not preprocess or validate parts lists, load or save registered
  name lists, or apply registered names and overrides to a list.
- It has no user interface, file dialogs or command-line program.

## Running the tests

Install the package with its `test` extra and run `pytest` from the project
directory.