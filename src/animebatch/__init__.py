"""
AnimeBatch - Scheduled exporter runner for AnimeDekho scrapes.

Runs the bulk SQL export, ships the dump to a remote server over FTP
and announces finished batches on a webhook.
"""

__version__ = "0.1.0"
__app_name__ = "animebatch"
