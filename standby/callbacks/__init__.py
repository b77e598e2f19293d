from standby.callbacks.log import log_callback

__all__ = ["log_callback"]
