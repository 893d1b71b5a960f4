"""
Playlist Generation

Writes one playlist per mount per relay. A listener's player tries the
relay it was given first and falls back to the other relays in fleet order.
The master is never listed; it only feeds the relays.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..configs import FleetConfig, FleetNode, NodeStage
from ..utils.templates import TemplateRenderer, get_renderer

_SERVING_STAGES = (NodeStage.READY, NodeStage.CONFIGURED)

# extension -> template
PLAYLIST_FORMATS: Dict[str, str] = {
    "m3u": "m3u.j2",
    "pls": "pls.j2",
}


def playlist_nodes(config: FleetConfig) -> List[FleetNode]:
    """Ready or configured relays that have an address, in fleet order"""
    return [n for n in config.relays if n.address and n.state.stage in _SERVING_STAGES]


def mount_url(config: FleetConfig, node: FleetNode, mount: str) -> str:
    return f"{config.server_url(node)}{mount}"


def playlist_entries(config: FleetConfig, mount: str) -> Dict[str, List[str]]:
    """
    Map each relay's name to its playlist URLs for a mount.

    The relay's own URL comes first, then every other relay's URL in
    fleet order.
    """
    nodes = playlist_nodes(config)
    entries: Dict[str, List[str]] = {}
    for i, node in enumerate(nodes):
        urls = [mount_url(config, node, mount)]
        urls.extend(mount_url(config, other, mount) for j, other in enumerate(nodes) if j != i)
        entries[node.name] = urls
    return entries


def render_m3u(urls: Sequence[str], renderer: Optional[TemplateRenderer] = None) -> str:
    """One URL per line"""
    return (renderer or get_renderer()).render(PLAYLIST_FORMATS["m3u"], urls=list(urls))


def render_pls(urls: Sequence[str], renderer: Optional[TemplateRenderer] = None) -> str:
    """FileN= entries (1-based) followed by NumberOfEntries"""
    return (renderer or get_renderer()).render(PLAYLIST_FORMATS["pls"], urls=list(urls))


class PlaylistGenerator:
    """Writes <mount>-<node>.<ext> files for every mount and format"""

    def __init__(self, config: FleetConfig, renderer: Optional[TemplateRenderer] = None):
        self.config = config
        self.renderer = renderer or get_renderer()

    def write(self, mounts: Sequence[str], output_dir: str = ".") -> List[Path]:
        out_dir = Path(output_dir)
        out_dir.mkdir(parents=True, exist_ok=True)

        written: List[Path] = []
        for mount in mounts:
            entries = playlist_entries(self.config, mount)
            for ext, template_name in PLAYLIST_FORMATS.items():
                for node_name, urls in entries.items():
                    path = out_dir / f"{mount}-{node_name}.{ext}"
                    path.write_text(self.renderer.render(template_name, urls=urls))
                    written.append(path)
        return written
