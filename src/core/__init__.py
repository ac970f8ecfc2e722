"""
Stream decoding and mode dispatch core of the chat client.
"""
