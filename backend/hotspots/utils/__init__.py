"""Pure helpers: geo math and result merging."""
