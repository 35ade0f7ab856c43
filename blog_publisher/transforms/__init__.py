"""Front-matter and transliteration transforms."""
