"""Protobuf messages exchanged with Bazel.

The message classes are built from descriptor protos at import time instead of
generated ``_pb2`` modules. Field names and numbers match Bazel's
``worker_protocol.proto``, ``deps.proto`` and ``java_compilation.proto``, so the
wire format is identical.
"""

from typing import Any

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

_F = descriptor_pb2.FieldDescriptorProto

_POOL = descriptor_pool.DescriptorPool()


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    *,
    repeated: bool = False,
    type_name: str | None = None,
) -> None:
    field = message.field.add(
        name=name,
        number=number,
        type=field_type,  # type: ignore[arg-type]
        label=_F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL,
    )
    if type_name is not None:
        field.type_name = type_name


def _worker_protocol() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto(
        name="jdt_builder/worker_protocol.proto", package="blaze.worker", syntax="proto3"
    )

    input_msg = fdp.message_type.add(name="Input")
    _add_field(input_msg, "path", 1, _F.TYPE_STRING)
    _add_field(input_msg, "digest", 2, _F.TYPE_BYTES)

    request = fdp.message_type.add(name="WorkRequest")
    _add_field(request, "arguments", 1, _F.TYPE_STRING, repeated=True)
    _add_field(request, "inputs", 2, _F.TYPE_MESSAGE, repeated=True, type_name=".blaze.worker.Input")
    _add_field(request, "request_id", 3, _F.TYPE_INT32)
    _add_field(request, "cancel", 4, _F.TYPE_BOOL)
    _add_field(request, "verbosity", 5, _F.TYPE_INT32)
    _add_field(request, "sandbox_dir", 6, _F.TYPE_STRING)

    response = fdp.message_type.add(name="WorkResponse")
    _add_field(response, "exit_code", 1, _F.TYPE_INT32)
    _add_field(response, "output", 2, _F.TYPE_STRING)
    _add_field(response, "request_id", 3, _F.TYPE_INT32)
    _add_field(response, "was_cancelled", 4, _F.TYPE_BOOL)
    return fdp


def _deps() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto(name="jdt_builder/deps.proto", package="blaze_deps", syntax="proto2")

    location = fdp.message_type.add(name="SourceLocation")
    _add_field(location, "path", 1, _F.TYPE_STRING)
    _add_field(location, "line", 2, _F.TYPE_INT32)
    _add_field(location, "column", 3, _F.TYPE_INT32)

    dependency = fdp.message_type.add(name="Dependency")
    kind = dependency.enum_type.add(name="Kind")
    for number, value in enumerate(("EXPLICIT", "IMPLICIT", "UNUSED", "INCOMPLETE")):
        kind.value.add(name=value, number=number)
    _add_field(dependency, "path", 1, _F.TYPE_STRING)
    _add_field(dependency, "kind", 2, _F.TYPE_ENUM, type_name=".blaze_deps.Dependency.Kind")
    _add_field(dependency, "location", 3, _F.TYPE_MESSAGE, repeated=True, type_name=".blaze_deps.SourceLocation")

    dependencies = fdp.message_type.add(name="Dependencies")
    _add_field(dependencies, "dependency", 1, _F.TYPE_MESSAGE, repeated=True, type_name=".blaze_deps.Dependency")
    _add_field(dependencies, "rule_label", 2, _F.TYPE_STRING)
    _add_field(dependencies, "success", 3, _F.TYPE_BOOL)
    _add_field(dependencies, "contained_package", 4, _F.TYPE_STRING, repeated=True)
    _add_field(dependencies, "requires_reduced_classpath_fallback", 5, _F.TYPE_BOOL)
    return fdp


def _java_compilation() -> descriptor_pb2.FileDescriptorProto:
    fdp = descriptor_pb2.FileDescriptorProto(
        name="jdt_builder/java_compilation.proto", package="blaze.buildjar", syntax="proto3"
    )

    unit = fdp.message_type.add(name="CompilationUnit")
    _add_field(unit, "path", 1, _F.TYPE_STRING)
    _add_field(unit, "pkg", 2, _F.TYPE_STRING)
    _add_field(unit, "generated_by_annotation_processor", 3, _F.TYPE_BOOL)
    _add_field(unit, "top_level", 4, _F.TYPE_STRING, repeated=True)

    manifest = fdp.message_type.add(name="Manifest")
    _add_field(
        manifest, "compilation_unit", 1, _F.TYPE_MESSAGE, repeated=True, type_name=".blaze.buildjar.CompilationUnit"
    )
    return fdp


for _fdp in (_worker_protocol(), _deps(), _java_compilation()):
    _POOL.AddSerializedFile(_fdp.SerializeToString())


def _message_class(full_name: str) -> Any:
    return message_factory.GetMessageClass(_POOL.FindMessageTypeByName(full_name))


WorkRequest = _message_class("blaze.worker.WorkRequest")
WorkResponse = _message_class("blaze.worker.WorkResponse")
Dependencies = _message_class("blaze_deps.Dependencies")
Manifest = _message_class("blaze.buildjar.Manifest")
