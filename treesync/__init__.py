"""treesync — keep an Android device/vendor source tree in sync."""

__version__ = "0.1.0"
