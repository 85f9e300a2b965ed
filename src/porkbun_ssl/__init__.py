"""
porkbun_ssl — scheduled SSL certificate renewal from the Porkbun API.

Retrieves certificate bundles for the configured domains on a cron
schedule and writes them to the filesystem, either as separate
certificate/key files or as one combined file per domain.

Built on the Railway-Oriented Programming (ROP) framework for
explicit, composable, functional error handling.
"""

__version__ = "0.1.0"
