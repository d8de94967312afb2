"""dumpapp client - ``python -m dumpapp``.

Usage::

    python -m dumpapp [-p <process>] <plugin> [args...]

The target device is taken from ``ANDROID_SERIAL`` and the process from
``-p`` or ``STETHO_PROCESS``. Without either, the only stetho-enabled
process on the device is used.
"""

from dumpapp.cli import main

if __name__ == "__main__":
    main()
