"""Engine version, part of every type and plan fingerprint."""

VERSION = "1.0.0"
