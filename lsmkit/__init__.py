"""In-memory building blocks for log-structured storage: Bloom filters, partitioned Bloom filters, B+ tree nodes and an ordered index."""

__version__ = "0.1.0"
__all__ = ["bloom", "partitioned", "index_types", "node", "tree"]