"""Describes the Miso kitchen domain. Centres around the `Recipe`.

Why is this hard?

- Every recipe comes out of a large language model as text.
  Sometimes it is JSON, sometimes it is JSON with chatter around it.
- Images come from two vendors. The primary one is asynchronous and
  inconsistent about where it puts a finished result.
- Nothing is stored. A request in, a recipe or an image out.

Should be able to fake the vendors. The parsers and the image controller
don't know about HTTP.
"""
