"""
# Photon slice files for humans.

A file format is described declaratively: a Chunk is a class whose attributes
are Fields, each one knowing how many bytes it takes and how to turn them
into a value. The formats live in their own subpackages, grouped by domain
(photonstruct.printing.photon for the Anycubic Photon slices).

Two basic main operations are defined for the file format and its sub components:

 1. unpack(): the more straightforward, i.e., reading the binary data
    and build a high-level representation of that.
    A field declared with an offset is read after seeking there, all the
    others are read where the previous one ended.

 2. pack(): encode the high-level representation into binary data.

to these we add one more

 3. relayout(): recompute offset and size of each component so to have
    them set in the correct way before packing.

Reading never goes beyond the data: a short read raises TruncatedException
and an offset outside the data raises SeekOutOfRangeException, both carrying
the chain of the fields involved.
"""
