"""Helpers for negotiating parameters and splitting payloads."""

from __future__ import annotations

from typing import Iterable, Sequence, TypeVar

from dtlskit.extension import SRTPProtectionProfile

T = TypeVar("T")


def find_matching_srtp_profile(
    a: Iterable[SRTPProtectionProfile], b: Sequence[SRTPProtectionProfile]
) -> SRTPProtectionProfile | None:
    """The first profile of a that also appears in b, or None."""
    return next((profile for profile in a if profile in b), None)


def _suite_id(suite: object) -> object:
    ident = getattr(suite, "id")
    return ident() if callable(ident) else ident


def find_matching_cipher_suite(a: Iterable[T], b: Sequence[object]) -> T | None:
    """The first suite of a whose id matches a suite in b, or None.

    Suites expose their identifier as an ``id`` attribute or method.
    """
    wanted = [_suite_id(suite) for suite in b]
    return next((suite for suite in a if _suite_id(suite) in wanted), None)


def split_bytes(data: bytes, split_len: int) -> list[bytes]:
    """Split data into chunks of split_len bytes; the last may be shorter."""
    if split_len <= 0:
        raise ValueError("split length must be positive")
    data = bytes(data)
    return [data[i : i + split_len] for i in range(0, len(data), split_len)]