"""
Core modules for the IIIF Image Server

- iiif_parser: URL segment grammar
- geometry: percentage region resolution
- transform_args: convert argument synthesis
- image_magick: convert/identify collaborators
- image_store: source image lookup
- response_cache: content-addressed cache with single-flight builds
"""
