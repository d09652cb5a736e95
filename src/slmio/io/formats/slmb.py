"""Reference binary build file format ("slmb").

All values are little-endian. Strings are a u32 byte length followed by
UTF-8 bytes.

    file      := magic "SLMB", u16 format_major, u16 format_minor,
                 header, u32 model_count, model*, u32 layer_count, layer*
    header    := str file_name, str creator, u16 major, u16 minor, u32 z_unit
    model     := u32 mid, u32 top_layer_id, str name, str style_name,
                 str style_description, u32 style_count, style*
    style     := u32 bid, str name, str description,
                 f64 power, f64 speed, f64 focus,
                 i32 point_distance, i32 point_exposure_time,
                 u32 laser_id, u8 laser_mode,
                 i32 point_delay, i32 jump_delay, i32 jump_speed
    layer     := u32 layer_id, i64 z, u64 payload_size, payload
    payload   := u32 geometry_count, geometry*
    geometry  := u8 type, u32 mid, u32 bid, u32 rows, f32[rows * 2]

Layer payloads are length-prefixed so a reader can skip them and come back
later; the offset of a skipped payload is the layer's file position.
"""

import io
import struct
from pathlib import Path
from typing import BinaryIO

import numpy as np
import structlog

from slmio.config import ReaderConfig
from slmio.domain.build_style import BuildStyle, LaserMode
from slmio.domain.document import BuildDocument
from slmio.domain.geometry import GEOMETRY_CLASSES, LayerGeometry, LayerGeometryType
from slmio.domain.header import Header
from slmio.domain.layer import Layer
from slmio.domain.model import Model
from slmio.exceptions import FileFormatError
from slmio.io.reader import Reader
from slmio.io.writer import Writer

MAGIC = b"SLMB"
FORMAT_VERSION = (1, 0)
EXTENSION = ".slmb"

U32_MAX = 0xFFFFFFFF

_PREAMBLE = struct.Struct("<4sHH")
_U32 = struct.Struct("<I")
_HEADER_TAIL = struct.Struct("<HHI")
_MODEL_IDS = struct.Struct("<II")
_STYLE_PARAMS = struct.Struct("<dddiiIBiii")
_LAYER = struct.Struct("<IqQ")
_GEOMETRY = struct.Struct("<BIII")
_COORD_DTYPE = np.dtype("<f4")


class _Source:
    """Bounds-checked reads from a binary stream, reporting byte offsets."""

    def __init__(self, stream: BinaryIO, path: str) -> None:
        self.stream = stream
        self.path = path
        start = stream.tell()
        self.size = stream.seek(0, io.SEEK_END)
        stream.seek(start)

    def error(self, details: str, offset: int | None = None) -> FileFormatError:
        return FileFormatError(self.path, details, self.stream.tell() if offset is None else offset)

    def read(self, size: int) -> bytes:
        offset = self.stream.tell()
        if offset + size > self.size:
            raise self.error(
                f"{size}-byte field runs past end of file ({self.size - offset} bytes left)",
                offset,
            )
        data = self.stream.read(size)
        if len(data) != size:
            raise self.error(
                f"unexpected end of file (wanted {size} bytes, got {len(data)})", offset
            )
        return data

    def unpack(self, fmt: struct.Struct) -> tuple:
        return fmt.unpack(self.read(fmt.size))

    def read_u32(self) -> int:
        return self.unpack(_U32)[0]

    def read_str(self) -> str:
        offset = self.stream.tell()
        data = self.read(self.read_u32())
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise self.error(f"invalid UTF-8 string: {e.reason}", offset) from e


def _pack_str(value: str) -> bytes:
    data = value.encode("utf-8")
    return _U32.pack(len(data)) + data


class SlmbReader(Reader):
    """Reader for the reference slmb format.

    With ``config.lazy_load`` set, layer payloads are skipped during parse and
    read the first time each layer's geometry is accessed.
    """

    format_name = "slmb"

    def __init__(
        self,
        file_path: Path | str | None = None,
        config: ReaderConfig | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        super().__init__(file_path, config=config, logger=logger)
        # Declared payload size of each deferred layer, keyed by file position
        self._payload_sizes: dict[int, int] = {}

    def _parse(self, stream: BinaryIO) -> BuildDocument:
        src = _Source(stream, str(self._file_path))
        self._payload_sizes = {}

        magic, major, minor = src.unpack(_PREAMBLE)
        if magic != MAGIC:
            raise src.error(f"bad signature {magic!r}, expected {MAGIC!r}", 0)
        if major != FORMAT_VERSION[0]:
            raise src.error(f"unsupported format version {major}.{minor}", 4)

        header = self._read_header(src)
        models = [self._read_model(src) for _ in range(src.read_u32())]
        layers = [self._read_layer(src) for _ in range(src.read_u32())]

        if stream.read(1):
            raise src.error("trailing data after last layer", stream.tell() - 1)

        return BuildDocument(header=header, models=models, layers=layers)

    def _read_header(self, src: _Source) -> Header:
        file_name = src.read_str()
        creator = src.read_str()
        offset = src.stream.tell()
        major, minor, z_unit = src.unpack(_HEADER_TAIL)
        if z_unit == 0:
            raise src.error("z_unit must be positive", offset + 4)
        return Header(file_name=file_name, creator=creator, version=(major, minor), z_unit=z_unit)

    def _read_model(self, src: _Source) -> Model:
        mid, top_layer_id = src.unpack(_MODEL_IDS)
        model = Model(
            mid=mid,
            top_layer_id=top_layer_id,
            name=src.read_str(),
            build_style_name=src.read_str(),
            build_style_description=src.read_str(),
        )
        model.set_build_styles([self._read_build_style(src) for _ in range(src.read_u32())])
        return model

    def _read_build_style(self, src: _Source) -> BuildStyle:
        bid = src.read_u32()
        name = src.read_str()
        description = src.read_str()
        offset = src.stream.tell()
        (
            power,
            speed,
            focus,
            point_distance,
            point_exposure_time,
            laser_id,
            laser_mode,
            point_delay,
            jump_delay,
            jump_speed,
        ) = src.unpack(_STYLE_PARAMS)

        try:
            mode = LaserMode(laser_mode)
        except ValueError as e:
            raise src.error(f"build style {bid} has unknown laser mode {laser_mode}", offset) from e

        return BuildStyle(
            bid=bid,
            name=name,
            description=description,
            laser_power=power,
            laser_speed=speed,
            laser_focus=focus,
            point_distance=point_distance,
            point_exposure_time=point_exposure_time,
            laser_id=laser_id,
            laser_mode=mode,
            point_delay=point_delay,
            jump_delay=jump_delay,
            jump_speed=jump_speed,
        )

    def _read_layer(self, src: _Source) -> Layer:
        layer_id, z, payload_size = src.unpack(_LAYER)
        layer = Layer(layer_id=layer_id, z=z)
        position = src.stream.tell()

        if self.config.lazy_load:
            end = src.stream.seek(payload_size, io.SEEK_CUR)
            if end > src.size:
                raise src.error(f"layer {layer_id} payload runs past end of file", position)
            self._payload_sizes[position] = payload_size
            layer.defer(position, self._hydrate)
            return layer

        layer.set_geometry(self._read_payload(src, layer, position, payload_size))
        return layer

    def _read_payload(
        self, src: _Source, layer: Layer, position: int, payload_size: int
    ) -> list[LayerGeometry]:
        geometry = [self._read_geometry(src, layer) for _ in range(src.read_u32())]
        consumed = src.stream.tell() - position
        if consumed != payload_size:
            raise src.error(
                f"layer {layer.layer_id} payload is {consumed} bytes, header says {payload_size}",
                position,
            )
        return geometry

    def _read_geometry(self, src: _Source, layer: Layer) -> LayerGeometry:
        offset = src.stream.tell()
        type_value, mid, bid, rows = src.unpack(_GEOMETRY)

        try:
            geometry_cls = GEOMETRY_CLASSES[LayerGeometryType(type_value)]
        except (ValueError, KeyError) as e:
            raise src.error(
                f"layer {layer.layer_id} has unknown geometry type {type_value}", offset
            ) from e

        data = src.read(rows * 2 * _COORD_DTYPE.itemsize)
        coords = np.frombuffer(data, dtype=_COORD_DTYPE).reshape(rows, 2)
        return geometry_cls(mid=mid, bid=bid, coords=coords)

    def _read_layer_geometry(self, stream: BinaryIO, layer: Layer) -> list[LayerGeometry]:
        src = _Source(stream, str(self._source_path))
        position = layer.layer_file_position
        payload_size = self._payload_sizes.get(position)
        if payload_size is None:
            raise src.error(f"no layer payload recorded at offset {position}", position)
        return self._read_payload(src, layer, position, payload_size)

    def get_layer_thickness(self) -> float:
        """Return the smallest z step between layers, in real units.

        Falls back to ``config.default_layer_thickness`` when there are fewer
        than two distinct layer heights.
        """
        document = self._require_document()
        zs = sorted({layer.z for layer in document.layers})
        steps = [b - a for a, b in zip(zs, zs[1:]) if b > a]
        if not steps:
            return self.config.default_layer_thickness
        return min(steps) / document.header.z_unit


class SlmbWriter(Writer):
    """Writer for the reference slmb format.

    Layer z must be integral; ids and counts must fit unsigned 32-bit fields.
    """

    format_name = "slmb"

    def _write(
        self,
        stream: BinaryIO,
        header: Header,
        models: list[Model],
        layers: list[Layer],
    ) -> None:
        path = str(self._file_path)
        try:
            stream.write(_PREAMBLE.pack(MAGIC, *FORMAT_VERSION))
            stream.write(self._encode_header(header))
            stream.write(self._encode_count(len(models), "models", path))
            for model in models:
                stream.write(self._encode_model(model, path))
            stream.write(self._encode_count(len(layers), "layers", path))
            for layer in layers:
                stream.write(self._encode_layer(layer, path))
        except struct.error as e:
            raise FileFormatError(path, f"value out of range for slmb field: {e}") from e

    def _encode_count(self, count: int, what: str, path: str) -> bytes:
        if count > U32_MAX:
            raise FileFormatError(path, f"{count} {what} exceeds the slmb limit of {U32_MAX}")
        return _U32.pack(count)

    def _encode_header(self, header: Header) -> bytes:
        major, minor = header.version
        return (
            _pack_str(header.file_name)
            + _pack_str(header.creator)
            + _HEADER_TAIL.pack(major, minor, header.z_unit)
        )

    def _encode_model(self, model: Model, path: str) -> bytes:
        parts = [
            _MODEL_IDS.pack(model.mid, model.top_layer_id),
            _pack_str(model.name),
            _pack_str(model.build_style_name),
            _pack_str(model.build_style_description),
            self._encode_count(len(model.build_styles), f"build styles in model {model.mid}", path),
        ]
        for style in model.build_styles:
            parts.append(_U32.pack(style.bid))
            parts.append(_pack_str(style.name))
            parts.append(_pack_str(style.description))
            parts.append(
                _STYLE_PARAMS.pack(
                    style.laser_power,
                    style.laser_speed,
                    style.laser_focus,
                    style.point_distance,
                    style.point_exposure_time,
                    style.laser_id,
                    style.laser_mode.value,
                    style.point_delay,
                    style.jump_delay,
                    style.jump_speed,
                )
            )
        return b"".join(parts)

    def _encode_layer(self, layer: Layer, path: str) -> bytes:
        z = layer.z
        if isinstance(z, float):
            if not z.is_integer():
                raise FileFormatError(path, f"layer {layer.layer_id} z={z} is not integral")
            z = int(z)

        geometry = layer.geometry
        parts = [self._encode_count(len(geometry), f"geometry items in layer {layer.layer_id}", path)]
        for geom in geometry:
            if geom.num_points > U32_MAX:
                raise FileFormatError(
                    path,
                    f"layer {layer.layer_id} geometry has {geom.num_points} points, "
                    f"exceeds the slmb limit of {U32_MAX}",
                )
            parts.append(_GEOMETRY.pack(geom.type.value, geom.mid, geom.bid, geom.num_points))
            parts.append(geom.coords.astype(_COORD_DTYPE, copy=False).tobytes())

        payload = b"".join(parts)
        return _LAYER.pack(layer.layer_id, z, len(payload)) + payload

