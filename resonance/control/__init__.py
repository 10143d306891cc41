"""Control window of the glyph preview (tabs, defaults and tooltips)."""
