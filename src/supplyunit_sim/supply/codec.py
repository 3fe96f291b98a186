"""
BarGraphs Wire Codec
====================

Protobuf encoding of reading batches for the visualization consumer.

Schema (proto3, package ``proto.geography``):

    enum BarType {
        BT_BOX_VARCOLOR = 0;
        BT_BOX_FIXCOLOR = 1;
        BT_CYLINDER_VARCOLOR = 2;
        BT_CYLINDER_FIXCOLOR = 3;
    }

    message BarData {
        double value = 1;
        string label = 2;
        int32 color = 3;
    }

    message BarGraph {
        int32 id = 1;
        google.protobuf.Timestamp ts = 2;
        BarType type = 3;
        int32 color = 4;
        double lon = 5;
        double lat = 6;
        double width = 7;
        double radius = 8;
        repeated BarData bar_data = 9;
        double min = 10;
        double max = 11;
        string text = 12;
    }

    message BarGraphs {
        repeated BarGraph bars = 1;
    }

The descriptors are built at import time in a private descriptor pool, so
no generated ``_pb2`` module is needed.
"""

import logging

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory, timestamp_pb2
from google.protobuf.message import DecodeError

from supplyunit_sim.models.reading import (
    BarType,
    Category,
    ReadingBatch,
    SupplyReading,
)


logger = logging.getLogger(__name__)

PROTO_PACKAGE = "proto.geography"

_FDP = descriptor_pb2.FieldDescriptorProto


class PayloadDecodeError(ValueError):
    """Bytes are not a valid BarGraphs message."""


def _add_field(message, name: str, number: int, field_type: int, type_name: str = "", repeated: bool = False) -> None:
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,
        label=_FDP.LABEL_REPEATED if repeated else _FDP.LABEL_OPTIONAL,
    )
    # type_name must stay unset for scalar fields
    if type_name:
        field.type_name = type_name


def _build_file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto(
        name="supplyunit_sim/geography.proto",
        package=PROTO_PACKAGE,
        syntax="proto3",
        dependency=["google/protobuf/timestamp.proto"],
    )

    bar_type = fdp.enum_type.add(name="BarType")
    for member in BarType:
        bar_type.value.add(name=member.name, number=member.value)

    bar_data = fdp.message_type.add(name="BarData")
    _add_field(bar_data, "value", 1, _FDP.TYPE_DOUBLE)
    _add_field(bar_data, "label", 2, _FDP.TYPE_STRING)
    _add_field(bar_data, "color", 3, _FDP.TYPE_INT32)

    bar_graph = fdp.message_type.add(name="BarGraph")
    _add_field(bar_graph, "id", 1, _FDP.TYPE_INT32)
    _add_field(bar_graph, "ts", 2, _FDP.TYPE_MESSAGE, ".google.protobuf.Timestamp")
    _add_field(bar_graph, "type", 3, _FDP.TYPE_ENUM, f".{PROTO_PACKAGE}.BarType")
    _add_field(bar_graph, "color", 4, _FDP.TYPE_INT32)
    _add_field(bar_graph, "lon", 5, _FDP.TYPE_DOUBLE)
    _add_field(bar_graph, "lat", 6, _FDP.TYPE_DOUBLE)
    _add_field(bar_graph, "width", 7, _FDP.TYPE_DOUBLE)
    _add_field(bar_graph, "radius", 8, _FDP.TYPE_DOUBLE)
    _add_field(bar_graph, "bar_data", 9, _FDP.TYPE_MESSAGE, f".{PROTO_PACKAGE}.BarData", repeated=True)
    _add_field(bar_graph, "min", 10, _FDP.TYPE_DOUBLE)
    _add_field(bar_graph, "max", 11, _FDP.TYPE_DOUBLE)
    _add_field(bar_graph, "text", 12, _FDP.TYPE_STRING)

    bar_graphs = fdp.message_type.add(name="BarGraphs")
    _add_field(bar_graphs, "bars", 1, _FDP.TYPE_MESSAGE, f".{PROTO_PACKAGE}.BarGraph", repeated=True)

    return fdp


_POOL = descriptor_pool.DescriptorPool()
_POOL.AddSerializedFile(timestamp_pb2.DESCRIPTOR.serialized_pb)
_POOL.AddSerializedFile(_build_file_descriptor().SerializeToString())

BarGraphs = message_factory.GetMessageClass(
    _POOL.FindMessageTypeByName(f"{PROTO_PACKAGE}.BarGraphs")
)


def encode_batch(batch: ReadingBatch) -> bytes:
    """Serialize a batch to BarGraphs bytes."""
    message = BarGraphs()
    for reading in batch:
        bar = message.bars.add()
        bar.id = reading.location_index
        bar.ts.seconds = reading.timestamp
        bar.type = int(reading.bar_type)
        bar.color = reading.color_hint
        bar.lon = reading.longitude
        bar.lat = reading.latitude
        bar.width = reading.width
        bar.radius = reading.radius
        for category in reading.categories:
            bar.bar_data.add(
                value=category.value,
                label=category.label,
                color=category.color,
            )
        bar.min = reading.min_scale
        bar.max = reading.max_scale
        bar.text = reading.label
    return message.SerializeToString()


def decode_batch(raw: bytes) -> ReadingBatch:
    """
    Parse BarGraphs bytes back into a ReadingBatch.

    Raises:
        PayloadDecodeError: If the bytes are not a valid message or carry
            an unknown bar type
    """
    message = BarGraphs()
    try:
        message.ParseFromString(raw)
    except DecodeError as e:
        raise PayloadDecodeError(f"Invalid BarGraphs payload: {e}") from e

    readings = []
    for bar in message.bars:
        try:
            bar_type = BarType(bar.type)
        except ValueError as e:
            raise PayloadDecodeError(f"Unknown bar type: {bar.type}") from e

        readings.append(
            SupplyReading(
                location_index=bar.id,
                timestamp=bar.ts.seconds,
                color_hint=bar.color,
                bar_type=bar_type,
                longitude=bar.lon,
                latitude=bar.lat,
                width=bar.width,
                radius=bar.radius,
                categories=tuple(
                    Category(value=d.value, label=d.label, color=d.color)
                    for d in bar.bar_data
                ),
                min_scale=bar.min,
                max_scale=bar.max,
                label=bar.text,
            )
        )
    return ReadingBatch(readings=tuple(readings))
