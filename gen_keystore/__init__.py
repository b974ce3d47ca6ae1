"""Generate an Android release keystore from key.properties."""
