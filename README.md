# meshcorres

meshcorres finds the triangles of a source mesh that correspond to triangles of
a target mesh. It first deforms the source mesh into the shape of the target
mesh. It then pairs up the triangles that end up close together.

You supply marker pairs, each tying a source vertex to a target vertex. Marked
source vertices are pinned to their target vertices. The other ("free")
vertices are found by a least-squares solve that minimises three terms:

- **smoothness**: adjacent triangles should deform in the same way.
- **identity**: no triangle should deform more than it needs to.
- **closest point**: each free vertex is pulled towards the nearest target
  vertex whose normal points less than 90 degrees away from its own.

The solve runs in two phases. Phase 1 uses only the smoothness and identity
terms. Phase 2 repeats the solve with the closest-point term added, raising its
weight over a schedule.

The deformed source is then compared with the target. A source triangle and a
target triangle correspond when both of these hold:

- Their centroids are closer than a search radius. The radius is
  `sqrt(4 * bounding-box surface area / triangle count)`, taking whichever of
  the two meshes gives the larger value.
- Their normals are less than 90 degrees apart.

## Installation

```
pip install .
```

The package depends on `numpy` and `scipy`. To run the tests, install the
`test` extra (`pip install .[test]`) and run `pytest`.

## Command line

```
corres-resolve source.obj target.obj markers.cons "[start:step:end]"
```

- `source.obj` and `target.obj` are Wavefront OBJ meshes of triangles with
  vertex normals. Faces must be written as `v//n` or `v/t/n`.
- `markers.cons` is the file of vertex constraints:

  ```
  3
  12, 40
  57, 88
  301, 250
  ```

  The first line gives the number of pairs. Each following line holds one pair
  of vertex indices, both counted from zero: `source_vertex, target_vertex`.
- `[start:step:end]` sets the closest-point weights of phase 2. They run from
  `start` up to but not including `end`, in steps of `step`, for example
  `[1:500:5001]`. Quote the argument so the shell leaves the brackets alone.
  When `start` is less than `end`, `step` must be positive.

The command always works out the triangle adjacency of the source mesh itself.
It uses a smoothness weight of 1.0 and an identity weight of 0.01. Progress
messages go to standard output.

The command writes two files into the current directory:

- `out.obj`: the deformed source mesh. It is rewritten after every solve.
- `out.tricorrs`: the triangle correspondences. The first line gives the number
  of entries. Each following line reads
  `source_triangle, target_triangle, squared_centroid_distance`.

If the command is given other than four arguments, it prints a usage line. If
it cannot read an input file or the input is malformed, it prints the error to
standard error and exits with status 1.

## Library use

```python
from meshcorres.problem import CorrespondenceProblem
from meshcorres.mesh import save_obj
from meshcorres.correspondence import save_correspondences

problem = CorrespondenceProblem.from_files(
    "source.obj", "target.obj", "markers.cons", None
)
problem.weight_smooth = 1.0
problem.weight_identity = 0.01
problem.weight_closest_start = 1.0
problem.weight_closest_step = 500.0
problem.weight_closest_end = 5001.0
result = problem.solve()          # also stored in problem.result

save_obj("deformed.obj", problem.source_model)
save_correspondences("deformed.tricorrs", result)
```

Notes on `CorrespondenceProblem`:

- The last argument of `from_files` is an optional path to a triangle-adjacency
  file. When it is `None`, `resolve_adjacencies` works out the adjacency from
  the source mesh.
- Setting `snapshot_path` saves the deformed source after every deformation
  step.
- `parse_schedule("[1:500:5001]")` turns a schedule string into a
  `(start, step, end)` tuple.

An adjacency file gives the triangle count on its first line. Then comes one
line per triangle in the form `i [a, b, c]`, where `-1` marks an empty slot.
The last line holds the total number of adjacencies. `AdjacencyList.dump`
writes every line of this form except that total.

## Modules

| Module | What it provides |
| --- | --- |
| `meshcorres.mesh` | `MeshModel`, `Triangle`, `read_obj` and `save_obj` |
| `meshcorres.geometry` | 3x3 inverse and product, triangle normals, surface matrices with the phantom vertex, and `inverse_surface_matrices` |
| `meshcorres.kdtree` | `KDTree`, a 3-d tree with nearest-neighbour search and range search, both taking an optional condition, plus `insert` |
| `meshcorres.constraint` | `VertexConstraint`, `load_constraints`, `save_constraints` and `mapped_vertex` |
| `meshcorres.adjacency` | `AdjacencyList`, `load_adjacencies`, `resolve_adjacencies` (edge-based) and `resolve_adjacencies_brute_force` |
| `meshcorres.vertex_info` | `VertexInfoList`, which labels vertices as free or constrained and places them in the unknown vector |
| `meshcorres.closest_point` | `build_vertex_tree`, `spatial_join` (tree-based) and `spatial_join_brute_force` |
| `meshcorres.elementary` | the per-triangle 9x4 coefficient matrices and their assembly into the system |
| `meshcorres.closest_term` | `append_closest`, the closest-point equations |
| `meshcorres.equations` | `append_smoothness`, `append_identity`, `build_phase1` and `build_phase2` |
| `meshcorres.linalg` | `TripletMatrix`, `least_squares` (normal equations, sparse LU), and Matrix Market reading and writing |
| `meshcorres.triangle_resolve` | centroids, `correspondence_threshold` and the two triangle-correspondence resolvers |
| `meshcorres.correspondence` | `TriangleCorrespondence`, `sort_unique`, `strip_correspondences`, `load_correspondences` and `save_correspondences` |
| `meshcorres.problem` | `CorrespondenceProblem`, `parse_schedule` and the command's `main` |

## What it does not do

- It offers no viewer and no interactive tool for placing marker points. The
  constraint file has to be written by hand or by some other program.
- It stops at the correspondences. It does not transfer the deformation of
  one mesh onto another.