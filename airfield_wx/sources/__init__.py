"""Raw weather data sources."""

from airfield_wx.sources.avwx import AvWxSource

__all__ = ['AvWxSource']
