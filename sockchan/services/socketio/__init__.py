from sockchan.services.socketio.ack import AckTable, AckTimeoutError
from sockchan.services.socketio.caller import Caller, RegistrationError, new_caller
from sockchan.services.socketio.channel import Channel, dump_payload
from sockchan.services.socketio.diagnostics import DiagnosticSink, StderrSink
from sockchan.services.socketio.dispatcher import Dispatcher
from sockchan.services.socketio.registry import MethodRegistry
from sockchan.services.socketio.tags import extract_channel_tag

__all__ = [
    "AckTable",
    "AckTimeoutError",
    "Caller",
    "Channel",
    "DiagnosticSink",
    "Dispatcher",
    "MethodRegistry",
    "RegistrationError",
    "StderrSink",
    "dump_payload",
    "extract_channel_tag",
    "new_caller",
]
