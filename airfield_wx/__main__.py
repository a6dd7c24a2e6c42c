import sys

from airfield_wx.cli import main

sys.exit(main())
