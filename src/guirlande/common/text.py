"""Shared text helpers."""

import re

_NON_SLUG = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lower-case kebab form, used for scheduler keys and route segments"""
    return _NON_SLUG.sub("-", value.lower()).strip("-")
