__title__ = "bstb"
__description__ = "Drain HTTP response bodies and async byte streams into str or bytes."
__version__ = "0.1.0"
