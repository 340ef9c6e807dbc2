"""
High-level API for working with OpenRaster files.

This subpackage provides the user-facing API for ora-tools. It wraps the
low-level :py:mod:`ora_tools.ora` container structures with a layer stack
that can be read, edited, composited, and written back.

The main entry point is :py:class:`~ora_tools.api.ora_image.OpenRasterImage`,
which provides document-level operations. Individual layers are represented
by :py:class:`~ora_tools.api.layers.Layer`.

Key modules:

- :py:mod:`ora_tools.api.ora_image`: Main OpenRasterImage class for document operations
- :py:mod:`ora_tools.api.layers`: Layer and LayerStack classes
- :py:mod:`ora_tools.api.importer`: ORA archive to layer stack
- :py:mod:`ora_tools.api.exporter`: Layer stack to ORA archive
- :py:mod:`ora_tools.api.protocols`: Interfaces expected from a host layer stack
- :py:mod:`ora_tools.api.pil_io`: PIL/Pillow image I/O utilities
- :py:mod:`ora_tools.api.numpy_io`: NumPy array I/O utilities

Example usage::

    from ora_tools import OpenRasterImage

    # Open an ORA file
    image = OpenRasterImage.open('document.ora')

    # Access layers, bottom to top
    for layer in image:
        print(f"{layer.name}: {layer.opacity:.2f}")

    # Modify a layer
    layer = image[0]
    layer.name = "New Name"
    layer.opacity = 0.5

    # Save changes
    image.save('modified.ora')

Host applications with their own layer manager can call
:py:func:`~ora_tools.api.importer.import_layers` and
:py:func:`~ora_tools.api.exporter.export_layers` directly with any object
implementing :py:class:`~ora_tools.api.protocols.LayerStackProtocol`.
"""
