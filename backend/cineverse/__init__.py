"""CineVerse Captions backend."""
