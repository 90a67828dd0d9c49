"""Domain enums for stickerfit."""

from enum import Enum


class ConversionState(Enum):
    """Lifecycle state of a single conversion run.

    Transitions:
        IDLE -> SCRATCH_ALLOCATED -> ENCODING
        ENCODING -> ENCODE_FAILED -> ENCODING (next parameter pair)
        ENCODING -> SIZE_CHECKED -> ACCEPTED | ENCODING (next parameter pair)
        ... -> ACCEPTED | EXHAUSTED
    SCRATCH_RELEASED follows every terminal state, including unhandled errors.
    """

    IDLE = "idle"
    SCRATCH_ALLOCATED = "scratch_allocated"
    ENCODING = "encoding"
    ENCODE_FAILED = "encode_failed"
    SIZE_CHECKED = "size_checked"
    ACCEPTED = "accepted"
    EXHAUSTED = "exhausted"
    SCRATCH_RELEASED = "scratch_released"
