"""
Communication interfaces

This module handles external communication including UDP messaging to the
persistence and latency collectors.
"""

from .udp_sender import UdpStateSender

__all__ = ['UdpStateSender']
