from .sink import CollectSink, JsonLinesSink, Sink, TextSink, create_sink, decode_path

__all__ = ["CollectSink", "JsonLinesSink", "Sink", "TextSink", "create_sink", "decode_path"]
