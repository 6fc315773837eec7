"""Student portal account service."""
