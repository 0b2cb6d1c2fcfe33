from maxwelldg.fea.post.exporter import ParaViewExporter
from maxwelldg.fea.post.io import ResultStore, load_results

__all__ = ["ParaViewExporter", "ResultStore", "load_results"]
