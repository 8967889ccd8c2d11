# rockglobe

Building blocks for a client that streams a planet-sized octree of textured
terrain and lets a player move around in it. The package is a library; it
has no command of its own.

## Modules

- `rockglobe.octant` – `OctantIdentifier`, an octree path such as `"3021"`
  packed into a 128-bit integer. It is hashable and ordered, supports
  `len()`, indexing, iteration, `+` with another identifier or a single
  octant digit, and `substr(start, length)`. `octant_path_to_directory`
  turns `"0213"` into the nested path `0/2/1/3`.
- `rockglobe.lifecycle` – `LifecycleObject` and `ObjectState`: the
  fresh → fetching → ready / failed → deleting state machine for streamed
  objects. Subclasses implement `populate()` and `clear()`; `can_be_used()`
  starts a fetch on a fresh object, `mark_for_deletion()` and
  `try_perform_deletion()` tear it down again, and `was_used_within()` checks
  the time since last use (in seconds) against a window chosen by state.
- `rockglobe.tasks` – `TaskManager`, a pool of worker threads over four
  priority queues (the lowest index runs first). `schedule(task, priority,
  is_high_priority_thread)`, `get_tasks(index=None)`, `lock_high_priority()`
  and `stop()`; it can also be used as a context manager.
  `task_manager_thread_count()` gives the default pool size.
- `rockglobe.cache` – `xxh32`, checksummed cache files (`write_cache_file`,
  `read_cache_file`, which returns `None` for missing, short or corrupt
  files), `build_cache_path` (under the system temporary directory),
  `build_google_url`, and the request names `bulk_filename` and
  `node_filename`. The download base URL is read from the
  `ROCKGLOBE_BASE_URL` environment variable and defaults to
  `http://localhost/rt/`.
- `rockglobe.decoding` – decoders for packed tile data: `unpack_var_int`,
  `unpack_vertices`, `unpack_tex_coords`, `unpack_indices`,
  `unpack_octant_mask_and_layer_bounds`, `unpack_obb` and
  `unpack_path_and_flags`, with the `Vertex`, `OrientedBoundingBox`,
  `PathAndFlags` and `TextureFormat` types.
- `rockglobe.registry` – `ObjectRegistry`, which owns streamed objects and,
  in time-limited passes (`cleanup_dangling_objects(timeout)`), drops those
  that lost their parent and marks the rest of the unlinked ones for
  deletion.
- `rockglobe.resources` – `Handle` (a resource name released exactly once),
  `DeferredDeleter` (collects released buffers and textures and deletes them
  in bulk on `perform_cleanup()`), `BufferTracker` and `BufferState` for a
  mesh's upload state, and `player_model_matrix`.
- `rockglobe.geodesy` – `lla_to_ecef`, `ecef_to_lla`, `sky_color`,
  `frustum_planes`, `classify_obb_frustum` with `FrustumClass`,
  `align_vector` and `vector_forward`.
- `rockglobe.controls` – `InputState`, `keyboard_to_input`,
  `gamepad_to_input`, `add_deadzone`, `merge_input_states`, `InputTracker`
  (sprint latching and one-shot gravity toggle), `ShotCooldown` and
  `FpsCounter`, plus the `Key`, `GamepadButton` and `GamepadAxis` codes.

## Installing

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## A short example

```python
from rockglobe.octant import OctantIdentifier
from rockglobe.geodesy import lla_to_ecef, ecef_to_lla

path = OctantIdentifier.from_string("3021")
child = path + OctantIdentifier.from_string("7")
print(str(child), len(child), child[4])   # 30217 5 7

eye = lla_to_ecef(48.8605, 2.2914, 6364690.0)
print(ecef_to_lla(eye))
```

## What it does not do

There is no window, renderer or text drawing, no HTTP downloader, no parsing
of the tile metadata messages, no physics simulation and no multiplayer
networking. The pieces here are meant to be wired into an application that
supplies those: for example, `DeferredDeleter` takes the functions that
actually delete graphics objects, and `keyboard_to_input` takes a function
that reports whether a key is pressed.