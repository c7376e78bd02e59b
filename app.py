#!/usr/bin/env python
"""Development entry point: ``python app.py`` from a source checkout."""

from spotiproxy.app import main

if __name__ == '__main__':
    main()
