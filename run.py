"""
Entry Point Script (Bootstrap)
==============================
Runs the cavity demo straight from a source checkout.

Why is this file needed?
------------------------
It sits outside the 'src' package and puts 'src' on 'sys.path', so
'from maxwelldg...' imports resolve without installing the package.

Usage:
    $ python run.py
"""
import sys
import os

current_dir: str = os.path.dirname(os.path.abspath(__file__))
src_path: str = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

from maxwelldg.main import main

if __name__ == "__main__":
    main()
