"""
Composite module for layer flattening.

This subpackage renders a layer stack into a single raster image, used for
the embedded thumbnail and for :py:meth:`OpenRasterImage.composite
<ora_tools.api.ora_image.OpenRasterImage.composite>`.

Layers are composited bottom to top with the normal (source-over) operator
on straight alpha, each scaled by its opacity. Invisible layers are skipped.

Example usage::

    from ora_tools import OpenRasterImage

    image = OpenRasterImage.open('document.ora')

    # Composite entire document to PIL Image
    flattened = image.composite()
    flattened.save('output.png')

The compositing engine uses NumPy arrays with values in [0.0, 1.0].
"""

from ora_tools.composite.composite import composite, composite_pil

__all__ = [
    "composite",
    "composite_pil",
]
