# mediameta

Pure-Python parsers for the structural metadata of media containers:

- **ISO base media files** (HEIF/HEIC, MP4, MOV): box headers, box traversal,
  and the `meta`, `iinf`, `iloc`, `idat`, `keys`, `ilst`, `mvhd` and `tkhd` boxes.
- **EBML files** (WebM, Matroska): variable-length integers, element headers,
  the EBML doc type, seek heads, segment info and video track dimensions.

It has no runtime dependencies.

## Installation

```
pip install .
```

## Modules

| Module | Contents |
| --- | --- |
| `mediameta.errors` | `MediaError` and its subclasses `ParseFailed`, `Incomplete`, `ParsingFailed`, `ClearAndSkip`, `MediaIOError`, `UnrecognizedFileFormat` |
| `mediameta.boxes` | `BoxHeader`, `FullBoxHeader`, `BoxHolder`, `parse_box_header`, `parse_full_box_header`, `parse_box_holder`, `travel_while`, `travel_header`, `find_box`, `parse_full_box` |
| `mediameta.idat` | `IdatBox`, `parse_idat_box` |
| `mediameta.iinf` | `InfeBox`, `IinfBox`, `parse_infe_box`, `parse_iinf_box` |
| `mediameta.iloc` | `ConstructionMethod`, `ItemLocation`, `ItemLocationExtent`, `IlocBox`, `parse_iloc_box` |
| `mediameta.keys` | `KeyEntry`, `KeysBox`, `parse_key_entry`, `parse_keys_box` |
| `mediameta.ilst` | `IlstItem`, `IlstBox`, `parse_ilst_item`, `parse_ilst_box`, `parse_value` |
| `mediameta.meta` | `MetaBox`, `parse_meta_box` |
| `mediameta.mvhd` | `MvhdBox`, `parse_mvhd_box` |
| `mediameta.tkhd` | `TkhdBox`, `parse_tkhd_box`, `parse_video_tkhd_in_moov` |
| `mediameta.vint` | `parse_unsigned`, `read_u64_with_marker`, `read_size`, `InvalidVInt` |
| `mediameta.element` | `ElementHeader`, `next_element_header`, `parse_ebml_doc_type`, `travel_while`, `find_element_by_id`, `get_as_u64`, `get_as_f64` |
| `mediameta.webm` | `parse_webm`, `EbmlFileInfo`, `parse_segment_info`, `parse_tracks_info`, `parse_seeks`, `parse_seek_head`, `parse_seek_entry` |

The box parsers take `bytes`, `bytearray` or `memoryview` and return a pair:
the bytes left after what was parsed (as a `memoryview`) and the parsed value.

## ISO base media boxes

```python
from mediameta.boxes import travel_while, find_box
from mediameta.mvhd import parse_mvhd_box
from mediameta.tkhd import parse_video_tkhd_in_moov

with open("clip.mp4", "rb") as f:
    data = f.read()

_, moov = travel_while(data, lambda b: b.box_type() != "moov")
_, mvhd = travel_while(moov.body_data(), lambda b: b.box_type() != "mvhd")
_, header = parse_mvhd_box(mvhd.data)
print(header.duration_ms(), header.creation_time_utc())

tkhd = parse_video_tkhd_in_moov(moov.body_data())
if tkhd is not None:
    print(tkhd.width, tkhd.height)

# Android phones keep GPS data in moov/udta/©xyz
_, gps = find_box(data, "moov/udta/©xyz")
```

`travel_while` returns `None` for the box when the input runs out before the
predicate turns false. Box types are decoded one character per byte, so types
such as `©xyz` can be matched directly.

QuickTime metadata lives in `moov/meta/keys` and `moov/meta/ilst`; parse them
with `parse_keys_box` and `parse_ilst_box`. The `index` of each `IlstItem`
(1-based) refers to the entry of the same position in the `KeysBox`.

## HEIF Exif location

```python
from mediameta.boxes import travel_while
from mediameta.meta import parse_meta_box

_, meta_holder = travel_while(data, lambda b: b.box_type() != "meta")
_, meta = parse_meta_box(meta_holder.data)
span = meta.exif_data_offset()      # range of the Exif item in the file, or None
_, exif = meta.exif_data(data)      # the Exif item bytes, or None
```

Only items stored by file offset are located; other construction methods give
`None` from `exif_data_offset` and raise `ParsingFailed` from `exif_data`.

## WebM / Matroska

```python
from mediameta.webm import parse_webm

with open("video.webm", "rb") as f:
    info = parse_webm(f.read())

print(info.doc_type)
print(info.track_info())   # CreateDate (if present), DurationMs, ImageWidth, ImageHeight
```

`parse_webm` uses the SeekHead to find the Info and Tracks elements when it can,
and otherwise scans the segment for them. The lower-level functions in
`mediameta.element` and `mediameta.vint` read from a binary file object such as
`io.BytesIO`.

## Errors

Every exception derives from `mediameta.errors.MediaError`.

- `Incomplete` is raised when the data ends before a box header, box or
  element is complete; its `needed` attribute says how many more bytes are
  required.
- `ParsingFailed` (and its subclasses such as `InvalidVInt`, `NotEBMLFile`,
  `NotWebmFile`, `InvalidSeekEntry`) is raised for malformed data. The
  fixed-layout box bodies (`keys`, `ilst`, `mvhd`, `tkhd`) also report short
  data this way.
- Both derive from `ParseFailed`.

## What it does not do

The package reads container structure only. It does not open files or
detect file formats on its own, it does not decode the Exif data it locates
in HEIF files, and it has no command-line tool: hand it the bytes and use the
values it returns.

## Running the tests

```
pip install .[test]
pytest
```